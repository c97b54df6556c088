"""Errors aborting an extraction run."""


class ExportError(Exception):
    """Base class for every error reported by the command line."""


class DatabaseError(ExportError):
    """The source database cannot be read."""


class SourceUnavailable(DatabaseError):
    """Source database missing or unreadable, or its host unreachable."""


class TransferError(SourceUnavailable):
    """Connecting to, authenticating with or copying from a remote host failed."""


class SchemaMismatch(DatabaseError):
    """Expected table or column absent, or the query cannot be prepared."""


class RowDecodingError(ExportError):
    """A row holds a NULL where a value is required, or an undecodable path."""


class WriteFailure(ExportError):
    """A destination file cannot be created or written."""
