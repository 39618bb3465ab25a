"""Schema-directed parsing of published spreadsheet HTML into typed records."""

from __future__ import annotations

import json
import math
import re
from typing import Any, Callable, Sequence

import structlog
from selectolax.parser import HTMLParser, Node

from ..errors import ParseError
from .models import DEFAULT_TYPE, FieldSpec, Record, Sheet, SpreadsheetDocument

TITLE_SELECTORS = ("#doc-title", "title")
MENU_SELECTOR = "#sheet-menu"
SHEET_ID_PATTERN = re.compile(r"\(\s*'([^'\"]+)'\s*\)")
_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PATTERN = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _to_int(value: str) -> int | None:
    match = _INT_PATTERN.match(value)
    if match is None:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        # digit strings beyond the interpreter's int conversion limit
        return None


def _to_float(value: str) -> float | None:
    try:
        number = float(value)
    except ValueError:
        match = _FLOAT_PATTERN.match(value)
        number = float(match.group(1)) if match else None
    if number is None or not math.isfinite(number):
        return None
    return number


def _to_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def _to_json(value: str) -> Any:
    if not value.strip():
        return None
    return json.loads(value)


COERCERS: dict[str, Callable[[str], Any]] = {
    "int": _to_int,
    "integer": _to_int,
    "float": _to_float,
    "double": _to_float,
    "bool": _to_bool,
    "boolean": _to_bool,
    "json": _to_json,
}


def coerce(value: str | None, type_tag: str | None = DEFAULT_TYPE) -> Any:
    """Convert raw cell text according to a field's type tag.

    Unrecognised tags pass the text through untouched. Integers and floats
    parse permissively and yield ``None`` when no number can be read.
    Malformed JSON raises ``json.JSONDecodeError``.
    """

    text = "" if value is None else value
    handler = COERCERS.get((type_tag or DEFAULT_TYPE).strip().lower())
    if handler is None:
        return text
    return handler(text)


def is_blank_row(cols: Sequence[str]) -> bool:
    return not cols or all(col == "" for col in cols)


class SheetParser:
    """Walk the sheet menu and per-sheet tables of a published spreadsheet."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self.logger = logger or structlog.get_logger("ghostsheet.parser")

    def parse_html(self, key: str, html: str | None) -> SpreadsheetDocument:
        if not html or not html.strip():
            raise ParseError(f"Empty document for key: {key}")
        return self.parse(key, HTMLParser(html))

    def parse(self, key: str, tree: HTMLParser | None) -> SpreadsheetDocument:
        if tree is None or tree.root is None:
            raise ParseError(f"Unparsable document for key: {key}")
        if self._is_empty(tree):
            raise ParseError(f"Empty document for key: {key}")
        document = SpreadsheetDocument(title=self._extract_title(tree), key=key)
        menu = tree.css_first(MENU_SELECTOR)
        if menu is None:
            self.logger.warning("sheet_menu_missing", key=key)
            return document
        for link in menu.css("a"):
            document.sheets.append(self._parse_sheet(tree, link))
        return document

    # ------------------------------------------------------------------
    @staticmethod
    def _is_empty(tree: HTMLParser) -> bool:
        return all(
            node is None or (next(node.iter(), None) is None and not node.text(strip=True))
            for node in (tree.head, tree.body)
        )

    def _extract_title(self, tree: HTMLParser) -> str:
        for selector in TITLE_SELECTORS:
            node = tree.css_first(selector)
            if node is not None:
                return node.text()
        return ""

    def _parse_sheet(self, tree: HTMLParser, link: Node) -> Sheet:
        sheet = Sheet(id=self.extract_sheet_id(link.attributes.get("onclick")), name=link.text())
        if sheet.id is None:
            self.logger.warning("sheet_id_unmatched", sheet=sheet.name)
            return sheet
        table = tree.css_first(f'[id="{sheet.id}"]')
        if table is None:
            self.logger.warning("sheet_table_missing", sheet=sheet.name, sheet_id=sheet.id)
            return sheet
        for index, row in enumerate(table.css("tr")):
            cols = [cell.text() for cell in row.css("td")]
            if is_blank_row(cols):
                continue
            if sheet.fields is None:
                sheet.fields = [FieldSpec.parse(col) for col in cols]
                continue
            sheet.items.append(self._build_record(sheet, cols, index))
        return sheet

    def _build_record(self, sheet: Sheet, cols: list[str], row_index: int) -> Record:
        record: Record = {}
        for i, field in enumerate(sheet.fields or ()):
            raw = cols[i] if i < len(cols) else ""
            try:
                record[field.name] = coerce(raw, field.type)
            except (ValueError, RecursionError) as exc:
                raise ParseError(
                    f"Unreadable {field.type} cell in sheet {sheet.name!r}, row {row_index}, field {field.name!r}: {exc}"
                ) from exc
        return record

    @staticmethod
    def extract_sheet_id(handler: str | None) -> str | None:
        if not handler:
            return None
        match = SHEET_ID_PATTERN.search(handler)
        return match.group(1) if match else None


__all__ = ["COERCERS", "SheetParser", "coerce", "is_blank_row"]
