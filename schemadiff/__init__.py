"""schemadiff - compare database schemas and flag breaking changes."""

__version__ = "1.0.0"
