"""
KSA Sequences — Errors
========================
Error types for keyed counter allocation.
Only transient storage conflicts are mapped here; every other storage
error propagates unchanged.
"""


class SequenceError(Exception):
    """Base error for sequence allocation."""
    pass


class SequenceConflict(SequenceError):
    """
    Transient conflict while incrementing a counter.

    The failed attempt returned no value, so retrying the same key can
    neither skip nor duplicate a number.
    """

    def __init__(self, key: str, detail: str = ""):
        self.key = key
        self.detail = detail
        message = f"Sequence conflict on key '{key}'."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)
