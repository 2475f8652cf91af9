"""
RDE Import Exceptions

Exception hierarchy for escrow import operations. Result codes follow the
EPP numbering the rest of the registry reports failures with.
"""

from typing import Optional


class RdeImportError(Exception):
    """Base escrow import exception."""

    def __init__(self, message: str, code: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.reason = reason

    def __str__(self):
        base = self.message
        if self.code:
            base = f"[{self.code}] {base}"
        if self.reason:
            base += f" - {self.reason}"
        return base


class MissingDataError(RdeImportError):
    """A structurally required field is absent (2003)."""

    def __init__(self, message: str):
        super().__init__(message, code=2003)


class ReferenceNotFoundError(RdeImportError):
    """A declared contact or host reference does not resolve (2303)."""

    def __init__(self, message: str, identifier: Optional[str] = None):
        super().__init__(message, code=2303)
        self.identifier = identifier


class UnsupportedFeatureError(RdeImportError):
    """The record uses a feature the importer does not implement (2102)."""

    def __init__(self, message: str):
        super().__init__(message, code=2102)


class ConflictError(RdeImportError):
    """A concurrent mutation invalidated the transaction (2400)."""

    def __init__(self, message: str = "Concurrent modification detected"):
        super().__init__(message, code=2400)


class EscrowXMLError(RdeImportError):
    """Escrow XML is malformed or structurally invalid."""

    def __init__(self, message: str = "Escrow XML error"):
        super().__init__(message)


class StoreError(RdeImportError):
    """Base exception for store errors."""

    def __init__(self, message: str):
        super().__init__(message)


class StoreConnectionError(StoreError):
    """Error establishing a database connection."""
    pass


class QueryError(StoreError):
    """Error executing a database query."""
    pass
