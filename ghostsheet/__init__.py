"""Fetch and cache published spreadsheet data as typed records."""

from .config import GhostsheetConfig, Mode
from .engine import FieldSpec, Sheet, SpreadsheetDocument
from .errors import (
    CacheMissError,
    CacheWriteError,
    ConfigurationError,
    FetchError,
    GhostsheetError,
    ParseError,
)
from .orchestrator import Ghostsheet, envelope
from .settlement import Settlement, SettlementState

__version__ = "2.0.0"

__all__ = [
    "CacheMissError",
    "CacheWriteError",
    "ConfigurationError",
    "FetchError",
    "FieldSpec",
    "Ghostsheet",
    "GhostsheetConfig",
    "GhostsheetError",
    "Mode",
    "ParseError",
    "Settlement",
    "SettlementState",
    "Sheet",
    "SpreadsheetDocument",
    "envelope",
]
