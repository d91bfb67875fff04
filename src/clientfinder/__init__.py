"""Find the direct clients of a Maven artifact."""

__version__ = "0.1.0"
