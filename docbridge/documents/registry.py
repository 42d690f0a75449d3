"""Authoritative client-side view of the user's documents.

Holds two things:

1. **Persisted documents** - what the active backend has stored for the
   signed-in user, replaced wholesale on every refresh.
2. **Extracted contents** - text of the latest upload batch, in upload
   order, replaced wholesale by each new batch.

A refresh that was overtaken by an endpoint switch or an identity change is
dropped instead of merged, so the list never shows another server's or
another user's documents.
"""

import logging
from collections.abc import Iterable, Sequence

import httpx

from docbridge.api.client import BackendClient
from docbridge.documents.selection import SelectionTracker
from docbridge.endpoints import EndpointSelector
from docbridge.errors import DeleteFailed, DocumentListFailed, NoSelection, Unauthenticated
from docbridge.models.schemas import NO_CONTENT_SENTINEL, PersistedDocument
from docbridge.session.manager import SessionManager

logger = logging.getLogger(__name__)


class DocumentRegistry:
    """Persisted documents plus the latest extracted contents."""

    def __init__(
        self,
        client: BackendClient,
        session: SessionManager,
        selector: EndpointSelector,
        selection: SelectionTracker,
    ) -> None:
        self._client = client
        self._session = session
        self._selector = selector
        self._selection = selection
        self._documents: tuple[PersistedDocument, ...] = ()
        self._extracted: tuple[str, ...] = ()

    @property
    def documents(self) -> list[PersistedDocument]:
        return list(self._documents)

    @property
    def extracted(self) -> list[str]:
        return list(self._extracted)

    def _is_current(self, generation: int, epoch: int) -> bool:
        return generation == self._selector.generation and epoch == self._session.epoch

    async def refresh(self) -> list[PersistedDocument]:
        """Reload the persisted document list from the active backend.

        Returns:
            The document list after the refresh.

        Raises:
            Unauthenticated: If nobody is signed in.
            CredentialFetchError: If no token could be obtained.
            DocumentListFailed: If the listing call for the current endpoint and
                session fails or is malformed.
        """
        if self._session.current_identity() is None:
            raise Unauthenticated()

        generation = self._selector.generation
        epoch = self._session.epoch
        token = await self._session.obtain_credential()

        try:
            listing = await self._client.list_documents(token)
        except (httpx.HTTPError, ValueError) as e:
            if not self._is_current(generation, epoch):
                logger.info(f"Ignoring failed listing from a superseded endpoint or session: {e}")
                return self.documents
            logger.warning(f"Document listing failed: {e}")
            raise DocumentListFailed() from e

        if not self._is_current(generation, epoch):
            logger.info("Discarding document listing from a superseded endpoint or session")
            return self.documents

        self._documents = tuple(listing.documents)
        logger.info(f"Loaded {len(self._documents)} documents")
        return self.documents

    async def apply_upload_result(self, contents: Sequence[str]) -> None:
        """Fold a successful extraction into the registry.

        The contents become visible before the follow-up refresh starts.
        """
        self._extracted = tuple(contents) if contents else (NO_CONTENT_SENTINEL,)
        await self.refresh()

    async def remove(self, ids: Iterable[str]) -> None:
        """Delete documents server-side and drop them locally.

        Raises:
            NoSelection: If ``ids`` is empty.
            Unauthenticated: If nobody is signed in.
            DeleteFailed: If the backend did not confirm the deletion.
        """
        targets = frozenset(ids)
        if not targets:
            raise NoSelection()
        if self._session.current_identity() is None:
            raise Unauthenticated()

        token = await self._session.obtain_credential()
        try:
            result = await self._client.delete_documents(token, sorted(targets))
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Delete of {len(targets)} documents failed: {e}")
            raise DeleteFailed() from e

        if not result.success:
            logger.warning("Backend did not confirm document deletion")
            raise DeleteFailed()

        self._documents = tuple(d for d in self._documents if d.id not in targets)
        self._selection.discard(targets)
        logger.info(f"Deleted {len(targets)} documents")

    def invalidate(self) -> None:
        """Forget persisted documents fetched from a previous endpoint."""
        self._documents = ()

    def clear(self) -> None:
        self._documents = ()
        self._extracted = ()
