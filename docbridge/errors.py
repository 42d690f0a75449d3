"""Typed failures raised by the orchestration core.

Every failure carries an ``ErrorKind`` and the message shown to the user.
Components raise these; the controller recovers them into outcomes.
"""

from enum import Enum

import httpx


class ErrorKind(str, Enum):
    """Classification of a failed operation."""

    UNAUTHENTICATED = "unauthenticated"
    CREDENTIAL_FETCH_FAILED = "credential_fetch_failed"
    NO_FILES_SELECTED = "no_files_selected"
    NO_SELECTION = "no_selection"
    NO_CONTENT_SOURCE = "no_content_source"
    EXTRACTION_FAILED = "extraction_failed"
    DOCUMENT_LIST_FAILED = "document_list_failed"
    DELETE_FAILED = "delete_failed"
    AI_REQUEST_FAILED = "ai_request_failed"
    BUSY = "busy"
    STALE_RESULT = "stale_result"


class AiFailureKind(str, Enum):
    """Where an AI request broke down."""

    RESPONDED = "responded"
    NO_RESPONSE = "no_response"
    NOT_SENT = "not_sent"


class DocBridgeError(Exception):
    """Base class for all orchestration failures."""

    kind: ErrorKind
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, user_message: str | None = None) -> None:
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class Unauthenticated(DocBridgeError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "You must sign in first."


class CredentialFetchError(DocBridgeError):
    kind = ErrorKind.CREDENTIAL_FETCH_FAILED
    default_message = "Authentication failed. Please sign in again."


class NoFilesSelected(DocBridgeError):
    kind = ErrorKind.NO_FILES_SELECTED
    default_message = "Please choose at least one file to upload."


class NoSelection(DocBridgeError):
    kind = ErrorKind.NO_SELECTION
    default_message = "Please select at least one document to delete."


class NoContentSource(DocBridgeError):
    kind = ErrorKind.NO_CONTENT_SOURCE
    default_message = "Please select at least one document to send to the AI."


class ExtractionFailed(DocBridgeError):
    kind = ErrorKind.EXTRACTION_FAILED
    default_message = "Error extracting document content. Please try again."


class DocumentListFailed(DocBridgeError):
    kind = ErrorKind.DOCUMENT_LIST_FAILED
    default_message = "Error loading documents. Please try again."


class DeleteFailed(DocBridgeError):
    kind = ErrorKind.DELETE_FAILED
    default_message = "Error deleting documents. Please try again."


class OperationInProgress(DocBridgeError):
    kind = ErrorKind.BUSY
    default_message = "Another request is still in progress."


class StaleResult(DocBridgeError):
    """The session or backend changed while a request was in flight."""

    kind = ErrorKind.STALE_RESULT
    default_message = "The session or backend changed before the request finished."


class AiRequestFailed(DocBridgeError):
    """The AI request failed; ``failure`` says at which stage.

    Attributes:
        failure: Whether the server responded, nothing came back, or the
            request never left the client.
        status_code: HTTP status for ``RESPONDED`` failures.
        detail: Server-supplied or local reason, if any.
    """

    kind = ErrorKind.AI_REQUEST_FAILED

    def __init__(
        self,
        failure: AiFailureKind,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        self.failure = failure
        self.status_code = status_code
        self.detail = detail
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        if self.failure is AiFailureKind.RESPONDED:
            base = f"AI request failed with status {self.status_code}"
            return f"{base}: {self.detail}" if self.detail else base
        if self.failure is AiFailureKind.NO_RESPONSE:
            return "No response from the AI service. Check your connection and try again."
        return f"Could not send the AI request: {self.detail or 'invalid request'}"


def server_message(response: httpx.Response) -> str | None:
    """Pull a human-readable error message out of an error response body.

    Looks at ``message``, ``error`` (string or ``{"message": ...}``) and
    FastAPI's ``detail``, in that order.
    """
    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return text or None

    if not isinstance(payload, dict):
        return None

    for key in ("message", "error", "detail"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, dict) and isinstance(value.get("message"), str):
            return value["message"]
    return None


def classify_ai_failure(exc: Exception) -> AiRequestFailed:
    """Map a transport-level exception onto the three AI failure stages."""
    if isinstance(exc, httpx.HTTPStatusError):
        return AiRequestFailed(
            AiFailureKind.RESPONDED,
            status_code=exc.response.status_code,
            detail=server_message(exc.response),
        )
    # Client-side protocol problems mean nothing was put on the wire
    if isinstance(exc, (httpx.UnsupportedProtocol, httpx.LocalProtocolError, httpx.InvalidURL)):
        return AiRequestFailed(AiFailureKind.NOT_SENT, detail=str(exc))
    if isinstance(exc, httpx.TransportError):
        return AiRequestFailed(AiFailureKind.NO_RESPONSE, detail=str(exc))
    return AiRequestFailed(AiFailureKind.NOT_SENT, detail=str(exc))
