"""AI request composition and dispatch.

The request body is shaped from the user's draft: provider, prompt and the
selected document ids always; the caller's own provider key only when the
caller opted in, and only for the active provider. The backend answers with
a flat ``{"message": ...}`` payload.

Failures are classified by where they happened:
    - responded: the backend returned an error status
    - no_response: the request went out but nothing came back
    - not_sent: the request could not be built or sent
"""

import logging

from pydantic import ValidationError

from docbridge.api.client import BackendClient
from docbridge.errors import (
    AiFailureKind,
    AiRequestFailed,
    NoContentSource,
    OperationInProgress,
    Unauthenticated,
    classify_ai_failure,
)
from docbridge.models.schemas import AiRequestDraft, Provider, SendToAiRequest
from docbridge.session.manager import SessionManager

logger = logging.getLogger(__name__)

_KEY_FIELDS = {
    Provider.OPENAI: "open_ai_api_key",
    Provider.CLAUDE: "claude_api_key",
}


def compose_request(draft: AiRequestDraft) -> SendToAiRequest:
    """Build the send-to-ai body for a draft.

    Args:
        draft: The user's request draft.

    Returns:
        Validated request body.

    Raises:
        AiRequestFailed: ``NOT_SENT`` when the draft cannot form a valid request.
    """
    fields: dict = {
        "api": draft.provider,
        "prompt": draft.prompt,
        "selected_document_ids": sorted(draft.selected_ids),
        "use_frontend_api_key": draft.use_caller_credential,
        "max_tokens": draft.max_tokens,
    }

    if draft.use_caller_credential and draft.provider in _KEY_FIELDS:
        credential = (draft.caller_credential or "").strip()
        if not credential:
            raise AiRequestFailed(
                AiFailureKind.NOT_SENT,
                detail=f"an API key for {draft.provider.value} is required",
            )
        fields[_KEY_FIELDS[draft.provider]] = credential

    try:
        return SendToAiRequest(**fields)
    except ValidationError as e:
        bad = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise AiRequestFailed(AiFailureKind.NOT_SENT, detail=f"invalid {bad or 'request'}") from e


class AiDispatcher:
    """Sends composed requests to the AI endpoint.

    ``busy`` is true while a request is pending; a second submit during that
    time is rejected instead of racing the first.
    """

    def __init__(self, client: BackendClient, session: SessionManager) -> None:
        self._client = client
        self._session = session
        self.busy = False

    async def submit(self, draft: AiRequestDraft) -> str:
        """Dispatch a draft and return the AI's answer.

        Preconditions are checked in order and stop at the first failure,
        before any network call.

        Raises:
            OperationInProgress: If a request is already pending.
            Unauthenticated: If nobody is signed in.
            NoContentSource: If no document is selected.
            CredentialFetchError: If no token could be obtained.
            AiRequestFailed: If the request could not be built, sent, or answered.
        """
        if self.busy:
            raise OperationInProgress()
        if self._session.current_identity() is None:
            raise Unauthenticated()
        if not draft.selected_ids:
            raise NoContentSource()

        request = compose_request(draft)

        self.busy = True
        try:
            token = await self._session.obtain_credential()
            logger.info(
                f"Sending prompt to {request.api.value} over "
                f"{len(request.selected_document_ids)} documents"
            )
            try:
                answer = await self._client.send_to_ai(token, request)
            except ValueError as e:
                # 2xx body that is not JSON or lacks a message field
                raise AiRequestFailed(
                    AiFailureKind.RESPONDED, status_code=200, detail="malformed response"
                ) from e
            except Exception as e:
                failure = classify_ai_failure(e)
                logger.warning(f"AI request failed ({failure.failure.value}): {e}")
                raise failure from e
        finally:
            self.busy = False

        return answer.message
