"""Services for searching, editing and saving voter records."""

from voterportal.services.field_reconciliation import FieldReconciler, apply_field_edit
from voterportal.services.orchestrator import EntryOrchestrator, SearchContext
from voterportal.services.record_collection import RecordCollection
from voterportal.services.store_client import RemoteStoreClient, StoreTransportError

__all__ = [
    "EntryOrchestrator",
    "FieldReconciler",
    "RecordCollection",
    "RemoteStoreClient",
    "SearchContext",
    "StoreTransportError",
    "apply_field_edit",
]
