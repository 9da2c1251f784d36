"""CRUD REST API for users, products and context records."""

__version__ = "0.1.0"
