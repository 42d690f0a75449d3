"""Integration tests for components working together as a system.

No mocks - the controller talks to the real development backend through
httpx.ASGITransport.

Coverage:
    - Development backend endpoints with real HTTP requests
    - Full workflow from sign-in through upload, selection, submit, delete
"""
