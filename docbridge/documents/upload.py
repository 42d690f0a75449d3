"""Batch upload and server-side text extraction.

All files of a batch travel together in one multipart request and are
extracted together. The pipeline returns the contents but never stores
them; callers fold a successful result into the registry, so a failed
upload leaves earlier contents untouched.
"""

import logging
from collections.abc import Sequence
from pathlib import PurePath

import httpx

from docbridge.api.client import BackendClient
from docbridge.errors import (
    ExtractionFailed,
    NoFilesSelected,
    OperationInProgress,
    Unauthenticated,
)
from docbridge.models.schemas import RawFile
from docbridge.session.manager import SessionManager

logger = logging.getLogger(__name__)


class UploadPipeline:
    """Sends upload batches to the extraction endpoint.

    ``busy`` is true while a batch is in flight; a second upload during that
    time is rejected.
    """

    def __init__(
        self,
        client: BackendClient,
        session: SessionManager,
        accepted_extensions: Sequence[str],
    ) -> None:
        self._client = client
        self._session = session
        self._accepted = tuple(accepted_extensions)
        self.busy = False

    async def upload(self, files: Sequence[RawFile]) -> list[str]:
        """Upload a batch and return its extracted text, one entry per file.

        Raises:
            OperationInProgress: If another upload is still running.
            Unauthenticated: If nobody is signed in.
            NoFilesSelected: If ``files`` is empty.
            CredentialFetchError: If no token could be obtained.
            ExtractionFailed: If the call fails or the payload is malformed.
        """
        if self.busy:
            raise OperationInProgress()
        if self._session.current_identity() is None:
            raise Unauthenticated()
        if not files:
            raise NoFilesSelected()

        for f in files:
            if PurePath(f.name).suffix.lower() not in self._accepted:
                logger.warning(f"Uploading {f.name} with an unexpected extension")

        self.busy = True
        try:
            token = await self._session.obtain_credential()
            try:
                result = await self._client.read_documents(token, files)
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Extraction failed for batch of {len(files)}: {e}")
                raise ExtractionFailed() from e
        finally:
            self.busy = False

        logger.info(f"Extracted {len(result.contents)} documents from {len(files)} files")
        return result.contents
