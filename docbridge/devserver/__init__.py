"""Development backend implementing the document/AI HTTP contract.

Endpoints:
    - GET /health: Service health status
    - GET /api/uploaded-documents: List the caller's documents
    - POST /api/read-document: Upload and extract a batch of files
    - DELETE /api/delete-documents: Delete documents by id
    - POST /api/send-to-ai: Echo the prompt over selected documents

Storage is in memory and tokens are ``<uid>.<nonce>`` strings as issued by
``docbridge.session.LocalAuthProvider``.
"""

from docbridge.devserver.app import create_app

__all__ = ["create_app"]
