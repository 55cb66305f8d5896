"""Exit codes shared by CLI commands."""

VALIDATION_EXIT_CODE = 2
UNIVERSE_EXIT_CODE = 3
STORE_EXIT_CODE = 4

__all__ = [
    "STORE_EXIT_CODE",
    "UNIVERSE_EXIT_CODE",
    "VALIDATION_EXIT_CODE",
]
