"""Client side of the backend HTTP contract.

Endpoints consumed:
    - GET /api/uploaded-documents: List the user's stored documents
    - POST /api/read-document: Upload a batch and extract its text
    - DELETE /api/delete-documents: Delete documents by id
    - POST /api/send-to-ai: Prompt an AI provider over selected documents
"""

from docbridge.api.client import BackendClient

__all__ = ["BackendClient"]
