"""Zero-knowledge relay for end-to-end encrypted messages."""

__version__ = "1.0.0"
