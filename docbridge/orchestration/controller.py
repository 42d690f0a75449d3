"""Application controller composing the orchestration core.

Wires the session, endpoint selector, backend client, registry, selection,
upload pipeline and dispatcher together, and is the only place where
failures are recovered. Every operation returns an ``Outcome`` and moves the
``AppState`` through its pure transitions; nothing raised by a component
escapes to the presentation layer.

Reactions to outside events:
    - sign-in schedules a document refresh
    - sign-out clears all session-scoped data
    - an endpoint switch invalidates the document list and schedules a refresh
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine, Iterable, Sequence
from typing import Any

import httpx

from docbridge.api.client import BackendClient
from docbridge.config import ClientConfig, get_client_config
from docbridge.documents.registry import DocumentRegistry
from docbridge.documents.selection import SelectionTracker
from docbridge.documents.upload import UploadPipeline
from docbridge.endpoints import EndpointSelector
from docbridge.errors import (
    AiFailureKind,
    AiRequestFailed,
    DocBridgeError,
    OperationInProgress,
    StaleResult,
    Unauthenticated,
)
from docbridge.models.schemas import AiRequestDraft, Endpoint, Identity, Provider, RawFile
from docbridge.orchestration import state as transitions
from docbridge.orchestration.dispatcher import AiDispatcher
from docbridge.orchestration.state import AppState, Outcome
from docbridge.session.manager import AuthProvider, SessionManager

logger = logging.getLogger(__name__)

StateListener = Callable[[AppState], None]


class AppController:
    """Stateful workflow behind the document/AI client.

    Args:
        auth_provider: Source of identity and bearer tokens.
        config: Client configuration. Loaded from environment if omitted.
        transport: Optional httpx transport for the backend client.
    """

    def __init__(
        self,
        auth_provider: AuthProvider,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or get_client_config()
        self.selector = EndpointSelector(self._config.base_urls(), self._config.default_endpoint)
        self.session = SessionManager(auth_provider)
        self.client = BackendClient(self.selector, transport=transport)
        self.selection = SelectionTracker()
        self.registry = DocumentRegistry(self.client, self.session, self.selector, self.selection)
        self.uploader = UploadPipeline(
            self.client, self.session, self._config.accepted_extensions
        )
        self.dispatcher = AiDispatcher(self.client, self.session)

        self._listeners: list[StateListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._state = AppState(endpoint=self.selector.current())
        identity = self.session.current_identity()
        if identity is not None:
            self._state = transitions.signed_in(self._state, identity)

        self.session.add_listener(self._on_identity_change)
        self.selector.add_listener(self._on_endpoint_change)

    # === State ===

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, callback: StateListener) -> None:
        self._listeners.append(callback)

    def _set_state(self, new_state: AppState) -> None:
        self._state = transitions.synced(
            new_state,
            endpoint=self.selector.current(),
            documents=self.registry.documents,
            extracted=self.registry.extracted,
            selection=self.selection.selected,
        )
        for listener in list(self._listeners):
            listener(self._state)

    # === Event reactions ===

    def _on_identity_change(self, identity: Identity | None) -> None:
        if identity is None:
            self.registry.clear()
            self.selection.clear()
            self._set_state(transitions.signed_out(self._state))
            return
        self.registry.clear()
        self.selection.clear()
        self._set_state(transitions.signed_in(self._state, identity))
        self._spawn(self.refresh_documents())

    def _on_endpoint_change(self, endpoint: Endpoint) -> None:
        self.registry.invalidate()
        self._set_state(self._state)
        if self.session.current_identity() is not None:
            self._spawn(self.refresh_documents())

    def _spawn(self, coro: Coroutine[Any, Any, Outcome]) -> None:
        try:
            task = asyncio.get_running_loop().create_task(coro)
        except RuntimeError:
            # No loop yet: the caller will refresh explicitly
            coro.close()
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for background refreshes scheduled by event reactions."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # === Operations ===

    def _snapshot(self) -> tuple[int, int]:
        return self.selector.generation, self.session.epoch

    def _is_current(self, snapshot: tuple[int, int]) -> bool:
        return snapshot == self._snapshot()

    def _reject(self, error: DocBridgeError) -> Outcome:
        self._set_state(transitions.operation_failed(self._state, error.user_message))
        return Outcome.failure(error)

    async def refresh_documents(self) -> Outcome:
        snapshot = self._snapshot()
        try:
            documents = await self.registry.refresh()
        except DocBridgeError as e:
            if self._is_current(snapshot):
                self._set_state(transitions.operation_failed(self._state, e.user_message))
            return Outcome.failure(e)
        if not self._is_current(snapshot):
            self._set_state(self._state)
            return Outcome.failure(StaleResult())
        self._set_state(transitions.operation_succeeded(self._state))
        return Outcome.success(documents)

    async def upload(self, files: Sequence[RawFile]) -> Outcome:
        """Upload a batch, fold its contents in, and refresh the list.

        Contents that come back after a sign-out, a user change or an
        endpoint switch are dropped. A failed follow-up listing does not
        undo a successful extraction; it only fills the message slot.
        """
        if self.uploader.busy:
            return self._reject(OperationInProgress())
        if self.session.current_identity() is None:
            return self._reject(Unauthenticated())

        snapshot = self._snapshot()
        self._set_state(transitions.upload_started(self._state))
        try:
            contents = await self.uploader.upload(files)
        except DocBridgeError as e:
            if not self._is_current(snapshot):
                e = StaleResult()
            self._set_state(transitions.upload_failed(self._state, e.user_message))
            return Outcome.failure(e)

        if not self._is_current(snapshot):
            logger.info(f"Dropping {len(contents)} extracted contents from a superseded session")
            error = StaleResult()
            self._set_state(transitions.upload_failed(self._state, error.user_message))
            return Outcome.failure(error)

        try:
            await self.registry.apply_upload_result(contents)
        except DocBridgeError as e:
            self._set_state(
                transitions.operation_failed(
                    transitions.upload_succeeded(self._state), e.user_message
                )
            )
            return Outcome.success(self.registry.extracted)

        self._set_state(transitions.upload_succeeded(self._state))
        return Outcome.success(self.registry.extracted)

    def set_selection(self, ids: Iterable[str]) -> None:
        self.selection.set_selection(ids)
        self._set_state(self._state)

    async def delete_selected(self) -> Outcome:
        targets = self.selection.selected
        try:
            await self.registry.remove(targets)
        except DocBridgeError as e:
            self._set_state(transitions.operation_failed(self._state, e.user_message))
            return Outcome.failure(e)

        self._set_state(transitions.operation_succeeded(self._state))
        return Outcome.success(sorted(targets))

    async def submit(
        self,
        prompt: str,
        provider: Provider | str = Provider.OPENAI,
        use_caller_credential: bool = False,
        caller_credential: str | None = None,
        max_tokens: int | None = None,
    ) -> Outcome:
        """Send the prompt over the current selection to the chosen provider.

        An answer or failure that arrives after the signed-in user changed is
        dropped without touching the state.
        """
        if self.dispatcher.busy:
            return self._reject(OperationInProgress())
        if self.session.current_identity() is None:
            return self._reject(Unauthenticated())

        epoch = self.session.epoch
        self._set_state(transitions.submit_started(self._state))
        try:
            draft = self._build_draft(
                prompt, provider, use_caller_credential, caller_credential, max_tokens
            )
            answer = await self.dispatcher.submit(draft)
        except DocBridgeError as e:
            if self.session.epoch != epoch:
                return Outcome.failure(StaleResult())
            self._set_state(transitions.submit_failed(self._state, e.user_message))
            return Outcome.failure(e)

        if self.session.epoch != epoch:
            logger.info("Dropping AI answer from a superseded session")
            return Outcome.failure(StaleResult())
        self._set_state(transitions.submit_succeeded(self._state, answer))
        return Outcome.success(answer)

    def _build_draft(
        self,
        prompt: str,
        provider: Provider | str,
        use_caller_credential: bool,
        caller_credential: str | None,
        max_tokens: int | None,
    ) -> AiRequestDraft:
        try:
            return AiRequestDraft(
                provider=Provider(provider),
                prompt=prompt,
                selected_ids=self.selection.selected,
                use_caller_credential=use_caller_credential,
                caller_credential=caller_credential,
                max_tokens=max_tokens,
            )
        except ValueError as e:
            raise AiRequestFailed(AiFailureKind.NOT_SENT, detail="invalid request fields") from e

    def toggle_endpoint(self) -> Endpoint:
        return self.selector.toggle()

    async def aclose(self) -> None:
        await self.drain()
        await self.client.aclose()
