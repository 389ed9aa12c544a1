"""appctl — operate a single deployed application."""

__version__ = "0.1.0"
