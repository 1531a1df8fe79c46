"""termtasks: keyboard-driven task lists in the terminal."""

__version__ = "0.1.0"
