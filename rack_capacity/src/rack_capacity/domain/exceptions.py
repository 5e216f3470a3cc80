"""Exceptions raised around the engine.

Domain services report domain outcomes (conflicts, empty results) as return
values. These exceptions cover lookup and I/O failures at the edges.
"""

from __future__ import annotations


class RackCapacityError(Exception):
    """Base error for the rack capacity engine."""
    pass


class SnapshotNotFoundError(RackCapacityError):
    """No facility snapshot exists for the requested site."""
    pass


class SnapshotFormatError(RackCapacityError):
    """A facility document could not be parsed into a snapshot."""
    pass


class DeviceNotFoundError(RackCapacityError):
    """A device referenced by a request is not in the snapshot."""
    pass
