"""Apply Dockerfile instructions, one at a time, to an image configuration."""

__version__ = "0.1.0"