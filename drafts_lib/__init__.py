"""Local persistent draft store with time-boxed recovery."""

__version__ = "0.1.0"
