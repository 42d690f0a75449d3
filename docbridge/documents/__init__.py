"""Document ingestion, registry, and selection.

Responsibilities:
    - Upload batches as one multipart request for server-side extraction
    - Track persisted documents and the latest extracted contents
    - Track which documents are selected for the next AI request
    - Reconcile the selection when documents are deleted
"""

from docbridge.documents.registry import DocumentRegistry
from docbridge.documents.selection import SelectionTracker
from docbridge.documents.upload import UploadPipeline

__all__ = ["DocumentRegistry", "SelectionTracker", "UploadPipeline"]
