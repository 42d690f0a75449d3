"""HTTP client for the document and AI backend.

Single seam for every network call the orchestration core makes. URLs are
resolved through the endpoint selector at call time, each call carries the
bearer token it was given, and responses are validated into wire models.

Errors are not translated here: ``httpx`` and Pydantic exceptions propagate
so that each caller can classify them for its own operation.
"""

import logging
from collections.abc import Sequence

import httpx

from docbridge.endpoints import EndpointSelector
from docbridge.models.schemas import (
    AiResponse,
    DeleteDocumentsRequest,
    DeleteDocumentsResponse,
    DocumentListResponse,
    ExtractionResponse,
    RawFile,
    SendToAiRequest,
)

logger = logging.getLogger(__name__)

LIST_DOCUMENTS_PATH = "/api/uploaded-documents"
READ_DOCUMENT_PATH = "/api/read-document"
DELETE_DOCUMENTS_PATH = "/api/delete-documents"
SEND_TO_AI_PATH = "/api/send-to-ai"


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class BackendClient:
    """Async client for the four backend operations.

    Args:
        selector: Resolves the active base URL.
        transport: Optional httpx transport (mock or ASGI in tests).
    """

    def __init__(
        self,
        selector: EndpointSelector,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._selector = selector
        self._http = httpx.AsyncClient(transport=transport)

    async def list_documents(self, token: str) -> DocumentListResponse:
        response = await self._http.get(
            self._selector.url(LIST_DOCUMENTS_PATH),
            headers=_auth_headers(token),
        )
        response.raise_for_status()
        return DocumentListResponse.model_validate(response.json())

    async def read_documents(self, token: str, files: Sequence[RawFile]) -> ExtractionResponse:
        """Send the whole batch as one multipart request.

        Every file goes under the repeated ``files`` field, in order.
        """
        multipart = [("files", (f.name, f.content, f.content_type)) for f in files]
        response = await self._http.post(
            self._selector.url(READ_DOCUMENT_PATH),
            files=multipart,
            headers=_auth_headers(token),
        )
        response.raise_for_status()
        return ExtractionResponse.model_validate(response.json())

    async def delete_documents(self, token: str, ids: Sequence[str]) -> DeleteDocumentsResponse:
        body = DeleteDocumentsRequest(document_ids=list(ids))
        response = await self._http.request(
            "DELETE",
            self._selector.url(DELETE_DOCUMENTS_PATH),
            json=body.model_dump(by_alias=True),
            headers=_auth_headers(token),
        )
        response.raise_for_status()
        return DeleteDocumentsResponse.model_validate(response.json())

    async def send_to_ai(self, token: str, request: SendToAiRequest) -> AiResponse:
        response = await self._http.post(
            self._selector.url(SEND_TO_AI_PATH),
            json=request.model_dump(mode="json", by_alias=True, exclude_none=True),
            headers=_auth_headers(token),
        )
        logger.debug(f"send-to-ai answered {response.status_code}")
        response.raise_for_status()
        return AiResponse.model_validate(response.json())

    async def aclose(self) -> None:
        await self._http.aclose()
