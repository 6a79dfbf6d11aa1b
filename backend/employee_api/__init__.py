"""REST facade over the upstream mock employee service."""

__version__ = "0.1.0"
