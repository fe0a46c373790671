"""Output helpers for the bpc CLI.

Every command emits a flat mapping (composition result, drift report or
fingerprint). Multi-line string values are policy documents and are kept
intact: fenced after the table in ``md``, indented below their key in
``table``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping


def render(data: Mapping[str, Any], fmt: str) -> str:
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)
    if fmt == "md":
        return _to_markdown(data)
    if fmt == "table":
        return _to_table(data)
    raise ValueError(f"Unsupported format: {fmt}")


def emit(data: Mapping[str, Any], fmt: str, output_path: Path | None = None) -> None:
    write_text(render(data, fmt), output_path)


def write_text(rendered: str, output_path: Path | None = None) -> None:
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered if rendered.endswith("\n") else rendered + "\n", encoding="utf-8")
    else:
        print(rendered)


def _cell(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value) or "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def _is_document(value: Any) -> bool:
    return isinstance(value, str) and "\n" in value


def _to_markdown(data: Mapping[str, Any]) -> str:
    lines = ["| Key | Value |", "| --- | --- |"]
    documents: list[tuple[str, str]] = []
    for key, value in data.items():
        if _is_document(value):
            documents.append((key, value))
            lines.append(f"| {key} | see below |")
        else:
            lines.append(f"| {key} | {_cell(value)} |")
    for key, document in documents:
        lines.extend(["", f"**{key}**", "", "```json", document, "```"])
    return "\n".join(lines)


def _to_table(data: Mapping[str, Any]) -> str:
    width = max((len(str(key)) for key in data), default=0)
    lines: list[str] = []
    for key, value in data.items():
        if _is_document(value):
            lines.append(f"{str(key).ljust(width)} :")
            lines.extend(f"    {line}" for line in value.splitlines())
        else:
            lines.append(f"{str(key).ljust(width)} : {_cell(value)}")
    return "\n".join(lines)


__all__ = ["emit", "render", "write_text"]
