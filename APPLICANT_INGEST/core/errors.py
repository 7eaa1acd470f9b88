class IngestError(Exception):
    """Base class for failures that abort a whole spreadsheet ingest."""


class DecodeError(IngestError):
    """The uploaded bytes are not a readable spreadsheet."""


class EmptySheetError(IngestError):
    """The first sheet has a header row at most, no data rows."""


class NoValidDataError(IngestError):
    """Reconciliation left nothing to persist."""


class PersistenceError(IngestError):
    """A storage fault other than a duplicate Aadhaar collision."""
