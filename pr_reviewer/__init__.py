"""Automated first-pass review of GitHub pull requests."""

__version__ = "0.1.0"
