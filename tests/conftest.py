"""Shared fixtures: configuration under tmp_path and sample published markup."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest
from selectolax.parser import HTMLParser
from structlog.testing import capture_logs

from ghostsheet.config import GhostsheetConfig, build_config
from ghostsheet.engine import FieldSpec, Sheet, SpreadsheetDocument
from ghostsheet.settlement import Settlement

SAMPLE_HTML = """
<html>
  <head><title>Fallback title</title></head>
  <body>
    <div id="doc-title">Members</div>
    <ul id="sheet-menu">
      <li><a href="#" onclick="switchToSheet('s1')">Sheet1</a></li>
      <li><a href="#" onclick="switchToSheet('1520')">Settings</a></li>
    </ul>
    <div id="s1">
      <table>
        <tr><th>1</th><td>name:string</td><td>age:int</td></tr>
        <tr><th>2</th><td>Alice</td><td>30</td></tr>
        <tr><th>3</th><td></td><td></td></tr>
        <tr><th>4</th><td>Bob</td><td>25</td></tr>
      </table>
    </div>
    <div id="1520">
      <table>
        <tr></tr>
        <tr><td>flag:bool</td><td>ratio:float</td><td>meta:json</td><td>note</td></tr>
        <tr><td>TRUE</td><td>0.5</td><td>{"a": [1, 2]}</td><td>plain</td></tr>
        <tr><td>no</td><td>2</td><td></td></tr>
      </table>
    </div>
  </body>
</html>
"""


def build_html(rows_by_sheet: dict[tuple[str, str], list[list[str]]], title: str = "Doc") -> str:
    menu = "".join(
        f"<li><a onclick=\"switchToSheet('{sheet_id}')\">{name}</a></li>"
        for sheet_id, name in rows_by_sheet
    )
    tables = "".join(
        f'<div id="{sheet_id}"><table>'
        + "".join("<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows)
        + "</table></div>"
        for (sheet_id, _name), rows in rows_by_sheet.items()
    )
    return (
        f'<html><body><div id="doc-title">{title}</div>'
        f'<ul id="sheet-menu">{menu}</ul>{tables}</body></html>'
    )


@pytest.fixture
def sample_html() -> str:
    return SAMPLE_HTML


@pytest.fixture(autouse=True)
def captured_logs():
    with capture_logs() as logs:
        yield logs


@pytest.fixture
def html_builder() -> Callable[..., str]:
    return build_html


@pytest.fixture
def sample_config(tmp_path: Path) -> Callable[..., GhostsheetConfig]:
    def _builder(**overrides: Any) -> GhostsheetConfig:
        base: dict[str, Any] = {
            "url": "https://sheets.example.com/d/{key}/pubhtml",
            "cache_dir": tmp_path / "cache",
            "cache_lifetime": 60,
            "timeout": 5,
        }
        base.update(overrides)
        return build_config(base)

    return _builder


@pytest.fixture
def sample_document() -> Callable[..., SpreadsheetDocument]:
    def _builder(key: str = "abc123", title: str = "Members") -> SpreadsheetDocument:
        return SpreadsheetDocument(
            title=title,
            key=key,
            sheets=[
                Sheet(
                    id="s1",
                    name="Sheet1",
                    fields=[FieldSpec(name="name"), FieldSpec(name="age", type="int")],
                    items=[{"name": "Alice", "age": 30}, {"name": "Bob", "age": 25}],
                ),
                Sheet(id="s2", name="Empty"),
            ],
        )

    return _builder


class StubFetcher:
    """Stand-in fetcher settling from canned HTML and counting calls."""

    def __init__(self, html: str | None = None, error: Exception | None = None) -> None:
        self.html = html
        self.error = error
        self.calls: list[str] = []
        self.closed = False

    def fetch(self, key: str) -> Settlement:
        self.calls.append(key)
        settlement = Settlement()
        if self.error is not None:
            return settlement.reject(self.error)
        return settlement.resolve(HTMLParser(self.html or ""))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def stub_fetcher() -> Callable[..., StubFetcher]:
    return StubFetcher
