"""
Utility modules for FlowSpace.

This module contains utility functions:
- validation: JSON Schema validation of LLM replies with auto-repair
- document_loader: Notes loading and PDF text extraction
- persistence: Profile, quiz library and theme storage
"""

from .validation import (
    SchemaValidator,
    ValidationResult,
    validate_quiz,
    validate_checkin,
    validate_plan,
)
from .document_loader import Document, extract_pdf_text, load_notes
from .persistence import FlowSpaceStore, get_store

__all__ = [
    # Validation
    "SchemaValidator",
    "ValidationResult",
    "validate_quiz",
    "validate_checkin",
    "validate_plan",
    # Documents
    "Document",
    "extract_pdf_text",
    "load_notes",
    # Persistence
    "FlowSpaceStore",
    "get_store",
]
