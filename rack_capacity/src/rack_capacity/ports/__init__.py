"""Ports for the rack capacity engine."""
