"""jpreader: reading progress and vocabulary tracking for tokenized Japanese text."""

__version__ = "0.1.0"
