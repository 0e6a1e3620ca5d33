"""Core utilities."""
