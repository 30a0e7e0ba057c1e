"""LangGraph state machine for chat turns."""
