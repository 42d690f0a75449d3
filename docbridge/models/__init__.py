"""Pydantic models for the backend contract and client-side state.

Provides type safety, validation, and camelCase wire aliases.

Models:
    - Identity: Signed-in user reference
    - PersistedDocument: Stored document (id, display name)
    - RawFile: One file of an upload batch
    - AiRequestDraft: User input for the next AI request
    - DocumentListResponse / ExtractionResponse: Document endpoints
    - DeleteDocumentsRequest / DeleteDocumentsResponse: Deletion endpoint
    - SendToAiRequest / AiResponse: AI endpoint
"""

from docbridge.models.schemas import (
    NO_CONTENT_SENTINEL,
    AiRequestDraft,
    AiResponse,
    DeleteDocumentsRequest,
    DeleteDocumentsResponse,
    DocumentListResponse,
    Endpoint,
    ExtractionResponse,
    Identity,
    PersistedDocument,
    Provider,
    RawFile,
    SendToAiRequest,
)

__all__ = [
    "NO_CONTENT_SENTINEL",
    "AiRequestDraft",
    "AiResponse",
    "DeleteDocumentsRequest",
    "DeleteDocumentsResponse",
    "DocumentListResponse",
    "Endpoint",
    "ExtractionResponse",
    "Identity",
    "PersistedDocument",
    "Provider",
    "RawFile",
    "SendToAiRequest",
]
