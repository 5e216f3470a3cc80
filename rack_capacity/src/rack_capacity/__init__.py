"""Rack capacity and placement engine for data-center digital twins."""

__version__ = "0.1.0"
