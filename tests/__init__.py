"""Test package for docbridge.

Unit tests exercise each component against scripted backends and fake auth
providers; integration tests drive the controller end to end against the
in-memory development backend.

Structure:
    - unit/: Individual component and state-transition tests
    - integration/: Development backend contract and full workflows

Leverages pytest with pytest-asyncio and pytest-check for soft assertions.
"""
