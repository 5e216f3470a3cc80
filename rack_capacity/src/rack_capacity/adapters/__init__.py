"""Adapters for the rack capacity engine."""
