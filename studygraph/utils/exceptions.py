"""Exception hierarchy for the document-to-knowledge-graph service."""

from __future__ import annotations


class StudyGraphError(Exception):
    """Base exception for all studygraph errors."""


# ── Input errors: surfaced to the caller, the pipeline never starts ──


class InputError(StudyGraphError):
    """The caller supplied something the service cannot process."""


class UnsupportedFileTypeError(InputError):
    """No text extractor is registered for the uploaded mime type."""

    def __init__(self, mime_type: str) -> None:
        super().__init__(f"Unsupported file type: {mime_type or 'unknown'}")
        self.mime_type = mime_type


class EmptyDocumentError(InputError):
    """The upload (or the text extracted from it) is empty."""


class FileTooLargeError(InputError):
    """The upload exceeds MAX_UPLOAD_BYTES."""


class TextExtractionError(StudyGraphError):
    """Decoding stored bytes into plain text failed."""


# ── Lookup / ownership ───────────────────────────────────────────────


class NotFoundError(StudyGraphError):
    """A document or knowledge graph does not exist for this user."""


class PermissionDeniedError(StudyGraphError):
    """The user does not own one of the referenced entities."""


# ── Provider errors: recovered inside the router, never surfaced ────


class ProviderError(StudyGraphError):
    """Base for language-model provider failures."""


class ProviderNotConfiguredError(ProviderError):
    """The provider has no credential configured."""


class ProviderResponseError(ProviderError):
    """The provider answered with an empty or malformed payload."""


# ── Storage ──────────────────────────────────────────────────────────


class PersistenceError(StudyGraphError):
    """Document / knowledge-graph repository failure."""


class GraphStoreError(StudyGraphError):
    """Neo4j graph store failure (non-fatal for the pipeline)."""
