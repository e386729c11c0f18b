"""Daily puzzle statistics extraction and publishing."""

__version__ = "0.1.0"
