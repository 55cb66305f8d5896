"""Core polling engine."""
