"""Exceptions raised outside the pure search core."""

from __future__ import annotations


class DocAnswerError(Exception):
    """Base class for DocAnswer errors."""


class InvalidDocumentError(DocAnswerError, ValueError):
    """A document record is missing required fields."""


class DocumentNotFoundError(DocAnswerError, LookupError):
    def __init__(self, document_id: int | str) -> None:
        super().__init__(f"Document {document_id} not found")
        self.document_id = document_id


class LLMUnavailableError(DocAnswerError):
    """No chat-completion provider is configured."""


class LLMRequestError(DocAnswerError):
    """The chat-completion provider failed to answer."""


class SummarizationError(LLMRequestError):
    """The chat-completion provider failed to produce a summary."""


class ClassificationError(LLMRequestError):
    """The chat-completion provider failed to classify a meeting note."""
