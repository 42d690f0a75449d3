"""Session tracking over an injected auth provider.

The auth provider is a capability, not an ambient singleton: anything that
can report the current identity, mint a token for it, and announce changes
can back a session. Tokens are requested fresh for every authenticated call
because they may expire between calls.
"""

import logging
from collections.abc import Callable
from typing import Protocol

from docbridge.errors import CredentialFetchError, Unauthenticated
from docbridge.models.schemas import Identity

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Identity | None], None]


class AuthProvider(Protocol):
    """What the session needs from an authentication backend."""

    def current_identity(self) -> Identity | None: ...

    async def fetch_token(self, identity: Identity) -> str: ...

    def add_listener(self, callback: IdentityListener) -> None: ...


class SessionManager:
    """Tracks the signed-in identity and hands out fresh bearer credentials.

    ``epoch`` increases on every identity change so that work started for
    one identity can recognise it has been overtaken.
    """

    def __init__(self, provider: AuthProvider) -> None:
        self._provider = provider
        self._identity = provider.current_identity()
        self._listeners: list[IdentityListener] = []
        self.epoch = 0
        provider.add_listener(self._on_provider_change)

    def current_identity(self) -> Identity | None:
        return self._identity

    def add_listener(self, callback: IdentityListener) -> None:
        self._listeners.append(callback)

    def _on_provider_change(self, identity: Identity | None) -> None:
        if identity == self._identity:
            return
        self._identity = identity
        self.epoch += 1
        if identity is None:
            logger.info("Signed out; session-scoped state will be discarded")
        else:
            logger.info(f"Signed in as {identity.uid}")
        for listener in list(self._listeners):
            listener(identity)

    async def obtain_credential(self) -> str:
        """Request a fresh bearer token for the current identity.

        Returns:
            Token string valid for a single call.

        Raises:
            Unauthenticated: If nobody is signed in.
            CredentialFetchError: If the provider cannot issue a token.
        """
        identity = self._identity
        if identity is None:
            raise Unauthenticated()

        try:
            token = await self._provider.fetch_token(identity)
        except Exception as e:
            logger.warning(f"Token fetch failed for {identity.uid}: {e}")
            raise CredentialFetchError() from e

        if not token:
            raise CredentialFetchError()
        return token
