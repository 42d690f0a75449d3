"""Request orchestration: composition, dispatch, and application state.

Responsibilities:
    - Compose and dispatch AI requests with classified failures
    - Hold application state as one immutable value with pure transitions
    - Coordinate session, documents, and endpoint switches in one controller
"""

from docbridge.orchestration.controller import AppController
from docbridge.orchestration.dispatcher import AiDispatcher, compose_request
from docbridge.orchestration.state import AppState, Outcome, Phase

__all__ = ["AiDispatcher", "AppController", "AppState", "Outcome", "Phase", "compose_request"]
