"""docbridge - client-side orchestration for document-grounded AI requests.

Combines httpx for backend calls, Pydantic for request/response validation,
NiceGUI for visualization, and FastAPI for the local development backend.

Components:
    - session: authenticated identity and per-call bearer credentials
    - endpoints: active backend base URL (local or hosted)
    - api: HTTP client for the document and AI backend contract
    - documents: registry, selection tracking, and the upload pipeline
    - orchestration: request composition, dispatch, and application state
    - ui: Web interface over the orchestration core
    - devserver: in-memory stub of the backend contract for local use
"""

__version__ = "0.1.0"
