"""Builders for raw Notion block JSON, shaped like the blocks API output."""
import itertools
from typing import Any, Dict, List, Optional

_ids = itertools.count(1)


def next_id() -> str:
    return f"block-{next(_ids)}"


def rich_text(text: str) -> List[Dict[str, Any]]:
    if not text:
        return []
    return [{
        "type": "text",
        "text": {"content": text, "link": None},
        "plain_text": text,
        "href": None,
        "annotations": {"bold": False, "italic": False, "code": False, "color": "default"},
    }]


def block(block_type: str, payload: Dict[str, Any], children: Optional[List[Dict[str, Any]]] = None,
          block_id: Optional[str] = None) -> Dict[str, Any]:
    raw = {
        "object": "block",
        "id": block_id or next_id(),
        "type": block_type,
        "has_children": bool(children),
        block_type: payload,
    }
    if children:
        raw["children"] = children
    return raw


def text_block(block_type: str, text: str, children=None, block_id=None, **extra) -> Dict[str, Any]:
    payload = {"rich_text": rich_text(text), "color": "default"}
    payload.update(extra)
    return block(block_type, payload, children, block_id)


def paragraph(text: str, **kwargs):
    return text_block("paragraph", text, **kwargs)


def heading(level: int, text: str, **kwargs):
    return text_block(f"heading_{level}", text, **kwargs)


def bullet(text: str, **kwargs):
    return text_block("bulleted_list_item", text, **kwargs)


def numbered(text: str, **kwargs):
    return text_block("numbered_list_item", text, **kwargs)


def todo(text: str, checked: bool = False, **kwargs):
    return text_block("to_do", text, checked=checked, **kwargs)


def quote(text: str, **kwargs):
    return text_block("quote", text, **kwargs)


def toggle(text: str, children=None, **kwargs):
    return text_block("toggle", text, children=children, **kwargs)


def code(text: str, language: str = "python", **kwargs):
    return text_block("code", text, language=language, **kwargs)


def callout(text: str, color: str = "default", children=None, block_id=None):
    payload = {"rich_text": rich_text(text), "color": color, "icon": {"type": "emoji", "emoji": "\U0001f4a1"}}
    return block("callout", payload, children, block_id)


def divider(block_id=None):
    return block("divider", {}, block_id=block_id)


def table(rows: List[List[str]], block_id=None):
    width = len(rows[0]) if rows else 0
    children = [block("table_row", {"cells": [rich_text(cell) for cell in row]}) for row in rows]
    payload = {"table_width": width, "has_column_header": True, "has_row_header": False}
    return block("table", payload, children, block_id)


def _media(block_type: str, url: str, caption: str = "", name: Optional[str] = None, hosted: bool = False,
           block_id=None):
    source = "file" if hosted else "external"
    payload = {"type": source, source: {"url": url}, "caption": rich_text(caption)}
    if name is not None:
        payload["name"] = name
    return block(block_type, payload, block_id=block_id)


def image(url: str, caption: str = "", **kwargs):
    return _media("image", url, caption, **kwargs)


def video(url: str, caption: str = "", **kwargs):
    return _media("video", url, caption, **kwargs)


def file(url: str, name: Optional[str] = None, caption: str = "", **kwargs):
    return _media("file", url, caption, name=name, **kwargs)


def pdf(url: str, name: Optional[str] = None, caption: str = "", **kwargs):
    return _media("pdf", url, caption, name=name, **kwargs)


def embed(url: str, caption: str = "", block_id=None):
    return block("embed", {"url": url, "caption": rich_text(caption)}, block_id=block_id)
