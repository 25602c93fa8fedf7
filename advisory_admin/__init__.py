"""Administrative tool for a security advisory database (publish pull requests)."""

__version__ = "0.1.0"
