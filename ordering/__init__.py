from .errors import (
    OrderError, OrderValidationError, SubmissionInProgressError,
    SubmissionError, TransportError, StorageError,
)
from .line_items import LineItemStore
from .pricing import compute_totals
from .assembler import assemble_submission, validate_order, read_submission
from .storage import MemoryStorage, SqliteStorage
from .gateway import SubmissionGateway, RemoteGateway, LocalFallbackGateway, create_gateway
from .reference_data import ReferenceData, load_reference_data
from .form import OrderForm, generate_document_number

__all__ = [
    "OrderError", "OrderValidationError", "SubmissionInProgressError",
    "SubmissionError", "TransportError", "StorageError",
    "LineItemStore", "compute_totals",
    "assemble_submission", "validate_order", "read_submission",
    "MemoryStorage", "SqliteStorage",
    "SubmissionGateway", "RemoteGateway", "LocalFallbackGateway", "create_gateway",
    "ReferenceData", "load_reference_data",
    "OrderForm", "generate_document_number",
]
