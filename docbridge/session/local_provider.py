"""Development auth provider.

Signs users in locally and issues ``<uid>.<nonce>`` tokens, which the
development backend in ``docbridge.devserver`` accepts. Every call to
``fetch_token`` mints a new nonce.
"""

import logging
import secrets

from docbridge.models.schemas import Identity
from docbridge.session.manager import IdentityListener

logger = logging.getLogger(__name__)


class LocalAuthProvider:
    """In-process auth provider for local development and tests."""

    def __init__(self) -> None:
        self._identity: Identity | None = None
        self._listeners: list[IdentityListener] = []

    def current_identity(self) -> Identity | None:
        return self._identity

    def add_listener(self, callback: IdentityListener) -> None:
        self._listeners.append(callback)

    def sign_in(self, uid: str, email: str | None = None) -> Identity:
        if "." in uid:
            raise ValueError("User id must not contain '.'")
        self._identity = Identity(uid=uid, email=email)
        self._emit()
        return self._identity

    def sign_out(self) -> None:
        self._identity = None
        self._emit()

    async def fetch_token(self, identity: Identity) -> str:
        return f"{identity.uid}.{secrets.token_hex(8)}"

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self._identity)
