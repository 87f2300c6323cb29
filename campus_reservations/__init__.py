"""Campus resource reservations: scheduling core and HTTP API."""

__version__ = "1.0.0"
