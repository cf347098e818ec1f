"""socialnet backend: users, authentication and session tokens."""

__version__ = "0.3.0"
