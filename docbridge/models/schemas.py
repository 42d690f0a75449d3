import mimetypes
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

NO_CONTENT_SENTINEL = "No content extracted."


class Provider(str, Enum):
    """AI backends the server can proxy to."""

    OPENAI = "openai"
    CLAUDE = "claude"
    CUSTOM = "custom"


class Endpoint(str, Enum):
    """Known backend deployments."""

    LOCAL = "local"
    HOSTED = "hosted"


class Identity(BaseModel):
    """Signed-in user as reported by the auth provider.

    Attributes:
        uid: Provider-assigned user identifier.
        email: Email address, when the provider exposes one.
    """

    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., min_length=1)
    email: str | None = None


class PersistedDocument(BaseModel):
    """A document the backend has stored for the current user.

    Attributes:
        id: Server-assigned identifier (``_id`` on the wire).
        name: Display name (``documentName`` on the wire).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str = Field(..., alias="documentName")


class RawFile(BaseModel):
    """One file of an upload batch."""

    name: str = Field(..., min_length=1)
    content: bytes
    content_type: str | None = None

    @model_validator(mode="after")
    def guess_content_type(self) -> "RawFile":
        if self.content_type is None:
            guessed, _ = mimetypes.guess_type(self.name)
            self.content_type = guessed or "application/octet-stream"
        return self


class AiRequestDraft(BaseModel):
    """Everything the user has entered for the next AI request.

    Attributes:
        provider: Which AI backend to use.
        prompt: Natural-language instruction.
        selected_ids: Persisted document ids to ground the request on.
        use_caller_credential: Send the caller's own provider key.
        caller_credential: Key for the active provider.
        max_tokens: Optional response token limit.
    """

    model_config = ConfigDict(frozen=True)

    provider: Provider = Provider.OPENAI
    prompt: str = ""
    selected_ids: frozenset[str] = frozenset()
    use_caller_credential: bool = False
    caller_credential: str | None = None
    max_tokens: int | None = None


# === Wire models ===


class DocumentListResponse(BaseModel):
    """Body of ``GET /api/uploaded-documents``."""

    documents: list[PersistedDocument] = Field(default_factory=list)


class ExtractionResponse(BaseModel):
    """Body of ``POST /api/read-document``."""

    contents: list[str] = Field(default_factory=list)


class DeleteDocumentsRequest(BaseModel):
    """Body of ``DELETE /api/delete-documents``."""

    model_config = ConfigDict(populate_by_name=True)

    document_ids: list[str] = Field(..., alias="documentIds", min_length=1)


class DeleteDocumentsResponse(BaseModel):
    success: bool = False


class SendToAiRequest(BaseModel):
    """Body of ``POST /api/send-to-ai``.

    Provider keys are only present when the caller supplies its own
    credential, and only for the active provider.
    """

    model_config = ConfigDict(populate_by_name=True)

    api: Provider
    prompt: str
    selected_document_ids: list[str] = Field(..., alias="selectedDocumentIds")
    use_frontend_api_key: bool = Field(False, alias="useFrontendApiKey")
    open_ai_api_key: str | None = Field(None, alias="openAiApiKey")
    claude_api_key: str | None = Field(None, alias="claudeApiKey")
    max_tokens: int | None = Field(None, alias="maxTokens", ge=1)

    @field_validator("prompt", mode="before")
    @classmethod
    def strip_prompt(cls, v: str) -> str:
        """Strip whitespace from prompt before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class AiResponse(BaseModel):
    """Body of a successful ``POST /api/send-to-ai``."""

    message: str
