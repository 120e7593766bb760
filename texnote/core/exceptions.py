"""
Exceptions raised by TexNote.

Nothing here is fatal to the process: callers degrade to a visible status
and continue with local-only operation.
"""

__all__ = [
    "TexnoteError",
    "ReadOnlyError",
    "ValidationError",
    "CyclicOrOrphanedHierarchy",
    "RemoteError",
    "RemoteUnreachable",
    "RemoteRejected",
    "RemoteShapeInvalid",
    "LocalCorrupt",
    "ImportShapeInvalid",
]


class TexnoteError(Exception):
    """
    Base class of all TexNote errors.
    """


class ReadOnlyError(TexnoteError):
    """
    Raised when user attempts to write a field which is read-only.
    """

    def __init__(self, field: str, note_id: str):
        self.field = field
        self.note_id = note_id
        super().__init__(
            f"Attempt to set read-only field '{field}' of note '{note_id}'"
        )


class ValidationError(TexnoteError):
    """
    Raised when a requested change would violate an invariant of the note
    collection. The change is not applied.

    Examples:

    - Note created under a parent which doesn't exist
    - Note moved under one of its own descendants
    - Update with a field of the wrong type
    """

    errors: list[str]

    def __init__(self, errors: list[str]):
        self.errors = errors
        errors_str = "\n".join(errors)
        super().__init__(f"Errors found during validation: {errors_str}")


class CyclicOrOrphanedHierarchy(ValidationError):
    """
    Raised by an explicit hierarchy check when parent references are
    malformed: dangling, cyclic, or duplicated ids.
    """


class RemoteError(TexnoteError):
    """
    Base class of errors talking to the remote store.
    """


class RemoteUnreachable(RemoteError):
    """
    Network or transport failure.
    """


class RemoteRejected(RemoteError):
    """
    Remote store answered with a non-success HTTP status.
    """

    status: int
    reason: str

    def __init__(self, status: int, reason: str = ""):
        self.status = status
        self.reason = reason
        super().__init__(f"Backend error: {status} {reason}".rstrip())


class RemoteShapeInvalid(RemoteError):
    """
    Remote payload didn't decode to an array of note records.
    """


class LocalCorrupt(TexnoteError):
    """
    Local cache holds data which can't be deserialized.
    """


class ImportShapeInvalid(TexnoteError):
    """
    User-supplied snapshot failed validation.
    """
