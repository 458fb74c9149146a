"""Error taxonomy for workbook-to-CSV conversion."""

from __future__ import annotations


class ConversionError(Exception):
    """Base error for any failed conversion step."""

    exit_code: int = 1


class DependencyError(ConversionError):
    """A reader library required for the source format is not installed."""


class OpenError(ConversionError):
    """Source workbook cannot be opened or parsed."""


class SheetSelectionError(ConversionError):
    """Requested sheet index does not exist in the workbook."""


class CreateError(ConversionError):
    """Destination directory or file cannot be created."""


class WriteError(ConversionError):
    """Writing to the destination stream failed."""


class ScanError(ConversionError):
    """Reading the next row failed mid-stream."""


class DiscoveryError(ConversionError):
    """Batch source directory cannot be used."""


class NotDirectoryError(DiscoveryError, NotADirectoryError):
    """Batch source path exists but is not a directory."""


class AccessError(DiscoveryError):
    """Batch source path cannot be opened or listed."""
