"""Unit tests for individual components in isolation.

Coverage:
    - session/: Identity tracking and credential freshness
    - documents/: Registry, selection, and upload pipeline
    - orchestration/: Request composition, dispatch, state, controller

HTTP is served by httpx.MockTransport; no sockets are opened.
"""
