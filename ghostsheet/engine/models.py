"""Structured representation of a parsed spreadsheet."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

DEFAULT_TYPE = "string"

Record = dict[str, Any]


class FieldSpec(BaseModel):
    """A ``name:type`` column declaration taken from a sheet's first populated row."""

    name: str
    type: str = DEFAULT_TYPE

    @classmethod
    def parse(cls, text: str) -> "FieldSpec":
        name, sep, type_tag = text.partition(":")
        type_tag = type_tag.strip() if sep else ""
        return cls(name=name.strip(), type=type_tag or DEFAULT_TYPE)


class Sheet(BaseModel):
    """One named tab of the source spreadsheet."""

    id: str | None = None
    name: str = ""
    fields: list[FieldSpec] | None = None
    items: list[Record] = Field(default_factory=list)


class SpreadsheetDocument(BaseModel):
    """Everything extracted from one published spreadsheet."""

    title: str = ""
    key: str
    sheets: list[Sheet] = Field(default_factory=list)


__all__ = ["DEFAULT_TYPE", "FieldSpec", "Record", "Sheet", "SpreadsheetDocument"]
