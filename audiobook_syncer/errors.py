"""Exceptions raised by the audiobook syncer."""

class SyncerError(Exception):
    """Base class for all syncer errors."""
    pass

class ParseError(SyncerError):
    """The transcript sync map is malformed."""
    pass

class TranscriptNotFound(SyncerError):
    """No sync map exists for the requested folder."""
    pass

class UnknownFileError(SyncerError):
    """An observation references a file that is not part of the loaded timeline."""

    def __init__(self, file_name: str):
        super().__init__(f"Unknown audio file: {file_name}")
        self.file_name = file_name

class DurationUnavailable(SyncerError):
    """The duration of an audio file could not be determined."""
    pass
