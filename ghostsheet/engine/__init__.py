"""Engine components: fetch → parse into typed sheets."""

from .fetcher import FetchResponse, Fetcher
from .models import FieldSpec, Record, Sheet, SpreadsheetDocument
from .parser import SheetParser, coerce

__all__ = [
    "FetchResponse",
    "Fetcher",
    "FieldSpec",
    "Record",
    "Sheet",
    "SheetParser",
    "SpreadsheetDocument",
    "coerce",
]
