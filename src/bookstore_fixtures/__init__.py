"""Test harness for exercising a SQLAlchemy book store schema."""

__version__ = "0.1.0"
