"""Inbound adapters for the rack capacity engine.

Provides the REST API adapter used by the twin viewer.
"""

from rack_capacity.adapters.inbound.rest_api import create_app

__all__ = ["create_app"]
