"""Find venues still open at a given time and plan a night out."""

__version__ = "0.1.0"
