"""Open relation extraction over sentences or pre-parsed dependency graphs."""

__version__ = "0.1.0"
