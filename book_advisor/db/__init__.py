"""Relational persistence for the reading list."""
