"""Event registration, ticketing and bracket service."""

__version__ = "1.0.0"
