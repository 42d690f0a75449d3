"""Development implementation of the backend HTTP contract.

Handles bearer authentication, document upload/extraction, listing,
deletion, and an echoing stand-in for the AI proxy.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, UploadFile, status

from docbridge.devserver.extraction import ExtractionError, extract_text
from docbridge.devserver.store import DocumentStore
from docbridge.models.schemas import (
    AiResponse,
    DeleteDocumentsRequest,
    DeleteDocumentsResponse,
    DocumentListResponse,
    ExtractionResponse,
    PersistedDocument,
    Provider,
    SendToAiRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def require_user(authorization: Annotated[str | None, Header()] = None) -> str:
    """Resolve the caller's user id from a ``Bearer <uid>.<nonce>`` header.

    Raises:
        HTTPException: 401 if the header is missing or malformed.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
        )

    token = authorization.removeprefix("Bearer ").strip()
    uid, _, nonce = token.partition(".")
    if not uid or not nonce:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid bearer token",
        )
    return uid


UserId = Annotated[str, Depends(require_user)]
Store = Annotated[DocumentStore, Depends(get_store)]


@router.get("/uploaded-documents", response_model=DocumentListResponse)
async def list_documents(uid: UserId, store: Store) -> DocumentListResponse:
    """List the caller's stored documents, oldest first."""
    return DocumentListResponse(
        documents=[PersistedDocument(id=d.id, name=d.name) for d in store.documents_for(uid)]
    )


@router.post("/read-document", response_model=ExtractionResponse)
async def read_documents(
    files: list[UploadFile], uid: UserId, store: Store
) -> ExtractionResponse:
    """Extract text from every uploaded file and store each as a document.

    Either the whole batch is stored or nothing is.

    Raises:
        400: A file is empty, oversized, or unreadable.
    """
    extracted: list[tuple[str, str]] = []
    for upload in files:
        filename = upload.filename or "untitled"
        content = await upload.read()
        try:
            extracted.append((filename, extract_text(filename, content)))
        except ExtractionError as e:
            logger.warning(f"Extraction failed for {filename}: {e}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e),
            ) from e

    for filename, text in extracted:
        store.add(uid, filename, text)

    logger.info(f"Stored {len(extracted)} documents for {uid}")
    return ExtractionResponse(contents=[text for _, text in extracted])


@router.delete("/delete-documents", response_model=DeleteDocumentsResponse)
async def delete_documents(
    body: DeleteDocumentsRequest, uid: UserId, store: Store
) -> DeleteDocumentsResponse:
    removed = store.delete(uid, body.document_ids)
    logger.info(f"Deleted {removed} of {len(body.document_ids)} documents for {uid}")
    return DeleteDocumentsResponse(success=True)


def _require_caller_key(body: SendToAiRequest) -> None:
    if not body.use_frontend_api_key:
        return
    if body.api is Provider.OPENAI and not body.open_ai_api_key:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="OpenAI API key is required")
    if body.api is Provider.CLAUDE and not body.claude_api_key:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Claude API key is required")


@router.post("/send-to-ai", response_model=AiResponse)
async def send_to_ai(body: SendToAiRequest, uid: UserId, store: Store) -> AiResponse:
    """Answer with an echo of the prompt over the selected documents.

    Raises:
        400: No documents selected, or a required caller key is missing.
        404: A selected document does not belong to the caller.
    """
    if not body.selected_document_ids:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="No documents selected")
    _require_caller_key(body)

    try:
        documents = store.get_many(uid, body.selected_document_ids)
    except KeyError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Unknown document {e}") from e

    names = ", ".join(d.name for d in documents)
    words = f"[{body.api.value}] {body.prompt} (documents: {names})".split()
    if body.max_tokens is not None:
        words = words[: body.max_tokens]
    return AiResponse(message=" ".join(words))
