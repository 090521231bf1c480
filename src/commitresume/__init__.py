"""Commit Resume - Turn repository commit history into resume bullet points."""

__version__ = "0.1.0"
