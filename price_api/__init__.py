"""Token price history service: cached provider series, alignment and weighted aggregates."""

__version__ = "0.1.0"
