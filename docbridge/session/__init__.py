"""Authenticated identity and per-call credentials."""

from docbridge.session.local_provider import LocalAuthProvider
from docbridge.session.manager import AuthProvider, SessionManager

__all__ = ["AuthProvider", "LocalAuthProvider", "SessionManager"]
