"""Active backend selection.

Exactly one of the two configured base URLs is active. Switching performs
no I/O; listeners are told so they can re-fetch from the new server, and
``generation`` lets in-flight work detect that it targeted the old one.
"""

import logging
from collections.abc import Callable

from docbridge.models.schemas import Endpoint

logger = logging.getLogger(__name__)


class EndpointSelector:
    """Holds which backend deployment all calls resolve against."""

    def __init__(self, base_urls: dict[Endpoint, str], active: Endpoint = Endpoint.LOCAL) -> None:
        missing = set(Endpoint) - set(base_urls)
        if missing:
            raise ValueError(f"Missing base URL for: {', '.join(sorted(e.value for e in missing))}")
        self._base_urls = dict(base_urls)
        self._active = active
        self._listeners: list[Callable[[Endpoint], None]] = []
        self.generation = 0

    def current(self) -> Endpoint:
        return self._active

    @property
    def base_url(self) -> str:
        return self._base_urls[self._active]

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def add_listener(self, callback: Callable[[Endpoint], None]) -> None:
        self._listeners.append(callback)

    def toggle(self) -> Endpoint:
        self._active = Endpoint.HOSTED if self._active is Endpoint.LOCAL else Endpoint.LOCAL
        self.generation += 1
        logger.info(f"Switched backend to {self._active.value} ({self.base_url})")
        for listener in list(self._listeners):
            listener(self._active)
        return self._active
