"""Application state as one immutable value with pure transitions.

The whole-app state machine::

    SignedOut -> Idle -> Uploading -> {Idle | UploadError}
                      -> Submitting -> {Idle + response | SubmitError}

Signing out from anywhere returns to ``SignedOut`` and drops everything
that belonged to the session. There is a single message slot: a failure
replaces it, a success clears it. An upload or submit completion arriving
after its phase has been left leaves the state untouched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from docbridge.errors import DocBridgeError
from docbridge.models.schemas import Endpoint, Identity, PersistedDocument


class Phase(str, Enum):
    SIGNED_OUT = "signed_out"
    IDLE = "idle"
    UPLOADING = "uploading"
    UPLOAD_ERROR = "upload_error"
    SUBMITTING = "submitting"
    SUBMIT_ERROR = "submit_error"


class AppState(BaseModel):
    """Snapshot of everything the presentation layer renders.

    Attributes:
        identity: Signed-in user, or None.
        phase: Position in the state machine.
        endpoint: Active backend.
        documents: Persisted documents of the active backend.
        extracted: Contents of the latest upload batch.
        selection: Selected document ids.
        message: The single user-visible error slot.
        response: Last AI answer.
    """

    model_config = ConfigDict(frozen=True)

    identity: Identity | None = None
    phase: Phase = Phase.SIGNED_OUT
    endpoint: Endpoint = Endpoint.LOCAL
    documents: tuple[PersistedDocument, ...] = ()
    extracted: tuple[str, ...] = ()
    selection: frozenset[str] = frozenset()
    message: str | None = None
    response: str | None = None

    @property
    def uploading(self) -> bool:
        return self.phase is Phase.UPLOADING

    @property
    def submitting(self) -> bool:
        return self.phase is Phase.SUBMITTING


@dataclass(slots=True, frozen=True)
class Outcome:
    """Result of a controller operation: a value or a classified error."""

    ok: bool
    value: Any = None
    error: DocBridgeError | None = None

    @classmethod
    def success(cls, value: Any = None) -> "Outcome":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: DocBridgeError) -> "Outcome":
        return cls(ok=False, error=error)


def signed_in(state: AppState, identity: Identity) -> AppState:
    return state.model_copy(
        update={"identity": identity, "phase": Phase.IDLE, "message": None, "response": None}
    )


def signed_out(state: AppState) -> AppState:
    return AppState(endpoint=state.endpoint)


def upload_started(state: AppState) -> AppState:
    return state.model_copy(update={"phase": Phase.UPLOADING, "message": None})


def upload_succeeded(state: AppState) -> AppState:
    if state.phase is not Phase.UPLOADING:
        return state
    return state.model_copy(update={"phase": Phase.IDLE, "message": None})


def upload_failed(state: AppState, message: str) -> AppState:
    if state.phase is not Phase.UPLOADING:
        return state
    return state.model_copy(update={"phase": Phase.UPLOAD_ERROR, "message": message})


def submit_started(state: AppState) -> AppState:
    return state.model_copy(
        update={"phase": Phase.SUBMITTING, "message": None, "response": None}
    )


def submit_succeeded(state: AppState, response: str) -> AppState:
    if state.phase is not Phase.SUBMITTING:
        return state
    return state.model_copy(update={"phase": Phase.IDLE, "message": None, "response": response})


def submit_failed(state: AppState, message: str) -> AppState:
    if state.phase is not Phase.SUBMITTING:
        return state
    return state.model_copy(update={"phase": Phase.SUBMIT_ERROR, "message": message})


def operation_failed(state: AppState, message: str) -> AppState:
    """Report a failure that does not move the state machine."""
    return state.model_copy(update={"message": message})


def operation_succeeded(state: AppState) -> AppState:
    return state.model_copy(update={"message": None})


def synced(
    state: AppState,
    *,
    endpoint: Endpoint,
    documents: list[PersistedDocument],
    extracted: list[str],
    selection: frozenset[str],
) -> AppState:
    """Mirror the component-owned data into the snapshot."""
    return state.model_copy(
        update={
            "endpoint": endpoint,
            "documents": tuple(documents),
            "extracted": tuple(extracted),
            "selection": selection,
        }
    )
