"""Snapshot locally built Homebrew bottles and Rubies into S3."""

__version__ = "0.1.0"
