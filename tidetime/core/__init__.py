"""Tide engine, queries and state management."""
