"""NiceGUI interface - thin presentation layer over the orchestration core.

Responsibilities:
    - Sign-in form backed by the local auth provider
    - Multi-file upload and extracted-content display
    - Document selection and deletion
    - Provider, prompt, caller key and token-limit inputs
    - Single message slot and AI response display

Contains no business logic. Every action is a controller call and every
render reads the controller's state snapshot.
"""
