"""Command line control for Philips Hue bridges."""

__version__ = "0.3.0"
