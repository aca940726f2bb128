"""
Tracker exceptions.

Only FormatError is meant to reach the user. StorageError is logged where it
happens and never interrupts the in-memory operation that caused it.
"""


class TrackerError(Exception):
    """Base exception for the tracker"""

    pass


class StorageError(TrackerError):
    """Reading or writing the local snapshot failed"""

    pass


class FormatError(TrackerError):
    """An imported document does not have the snapshot structure"""

    pass
