"""Tide curves and extremes for a selected coastal location."""
