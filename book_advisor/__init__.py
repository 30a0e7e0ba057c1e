"""Book Advisor: a reading assistant chat service backed by an LLM with tools."""

__version__ = "0.1.0"
