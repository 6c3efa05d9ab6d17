"""Exception hierarchy for hospm."""

from __future__ import annotations


class HospmError(Exception):
    """Base class for all hospm errors."""


class DataFormatError(HospmError):
    """Raised when project data cannot be turned into a Project."""


class ParseError(DataFormatError):
    """Raised when JSON text is malformed."""


class SchemaValidationError(DataFormatError):
    """Raised when JSON is well-formed but has the wrong shape."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid project data: " + "; ".join(self.errors))


class SerializeError(HospmError):
    """Raised when an object cannot be encoded as JSON."""


class NoProjectError(HospmError):
    """Raised when an operation needs a loaded project and there is none."""


class EntityNotFoundError(HospmError, LookupError):
    """Raised when a mutation targets a stage, link or item that does not exist."""


class LinkNotFoundError(EntityNotFoundError):
    """Raised when a (stage id, link id) pair does not resolve."""


class ItemNotFoundError(EntityNotFoundError):
    """Raised when an item id does not resolve within its link."""


class TemplateNotFoundError(EntityNotFoundError):
    """Raised when a template id is unknown."""


class InvalidEnumError(HospmError, ValueError):
    """Raised when a value is outside an allowed set."""


class InvalidStatusError(InvalidEnumError):
    """Raised for an item status outside todo / in-progress / done."""


class InvalidItemError(HospmError, ValueError):
    """Raised when item data cannot be turned into an item."""


class PersistenceError(HospmError):
    """Raised by storage backends when a read or write fails."""


class FileReadError(HospmError):
    """Raised when an import file cannot be read."""


class FileWriteError(HospmError):
    """Raised when an export file cannot be written."""
