"""Exception classes raised by the chunk planner and writer."""


class ChunkError(Exception):
    """
    Base exception class for all chunking errors.

    Errors raised while a range is being processed carry it in `chunk_range`
    so a failed run can be resumed from there.
    """

    def __init__(self, message, chunk_range=None):
        if chunk_range is not None:
            message = f"{message} (chunk {chunk_range.name})"
        super().__init__(message)
        self.chunk_range = chunk_range


class InvalidConfiguration(ChunkError, ValueError):
    """
    Raised when the chunk size is not a positive integer.
    """
    pass


class InvalidInput(ChunkError, ValueError):
    """
    Raised for a missing or unreadable source, or a negative file size.
    """
    pass


class FileSystemError(ChunkError, OSError):
    """
    Raised when a directory, source, destination or artifact cannot be
    created, opened or deleted.
    """
    pass


class ShortReadError(FileSystemError):
    """
    Raised when the source returns fewer bytes than the planned range.
    """
    pass


class StateError(ChunkError, RuntimeError):
    """
    Raised when a plan-dependent value is requested before planning ran.
    """
    pass
