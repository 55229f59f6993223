"""
Table classification.

A Notion table arrives as a ``table`` block whose children are ``table_row``
blocks; the first row holds the headers. Header keywords decide whether the
table is a lesson timeline, a vocabulary list or a materials checklist.
"""
import logging
from enum import Enum
from typing import List, Optional, Union

from notion_blocks.blocks import Block, BlockType
from lesson_parser.section_models import (
    ChecklistItem,
    ChecklistSection,
    EmbeddedTable,
    TimelineRow,
    TimelineSection,
    VocabularySection,
    VocabularyTerm,
)

logger = logging.getLogger(__name__)

TableSection = Union[TimelineSection, VocabularySection, ChecklistSection]


class TableType(Enum):
    TIMELINE = "timeline"
    VOCABULARY = "vocabulary"
    CHECKLIST = "checklist"
    UNKNOWN = "unknown"


# Header groups used for classification
TIME_HEADERS = ["time", "when", "schedule"]
ACTIVITY_HEADERS = ["activity", "task", "what", "action", "topic", "section", "content", "phase", "step"]
DURATION_HEADERS = ["duration", "length", "mins", "min"]
TERM_HEADERS = ["term", "word", "concept", "name"]
DEFINITION_HEADERS = ["definition", "meaning", "description", "explanation"]
ITEM_HEADERS = ["item", "material", "tool", "equipment"]
QUANTITY_HEADERS = ["quantity", "amount", "qty", "count"]

# Column lookups are narrower than the classification groups
TIME_COLUMN = TIME_HEADERS
ACTIVITY_COLUMN = ["activity", "task", "what", "topic", "section", "content", "phase", "step"]
DURATION_COLUMN = ["duration", "length", "mins"]
NOTES_COLUMN = ["notes", "comment"]
TERM_COLUMN = TERM_HEADERS
DEFINITION_COLUMN = ["definition", "meaning", "description"]
ITEM_COLUMN = ["item", "material", "tool"]
QUANTITY_COLUMN = ["quantity", "amount", "qty"]


def _any_header(headers: List[str], keywords: List[str]) -> bool:
    return any(keyword in header for header in headers for keyword in keywords)


def _column_index(headers: List[str], keywords: List[str]) -> int:
    for index, header in enumerate(headers):
        if any(keyword in header for keyword in keywords):
            return index
    return -1


def _cell(cells: List[str], index: int) -> str:
    if 0 <= index < len(cells):
        return cells[index]
    return ""


def detect_table_type(headers: List[str]) -> TableType:
    """
    Timeline needs a time column plus an activity or duration column,
    vocabulary a term plus a definition column, checklist an item plus a
    quantity column. Checked in that order.
    """
    lower_headers = [h.lower().strip() for h in headers]

    if _any_header(lower_headers, TIME_HEADERS) and (
        _any_header(lower_headers, ACTIVITY_HEADERS) or _any_header(lower_headers, DURATION_HEADERS)
    ):
        return TableType.TIMELINE

    if _any_header(lower_headers, TERM_HEADERS) and _any_header(lower_headers, DEFINITION_HEADERS):
        return TableType.VOCABULARY

    if _any_header(lower_headers, ITEM_HEADERS) and _any_header(lower_headers, QUANTITY_HEADERS):
        return TableType.CHECKLIST

    return TableType.UNKNOWN


def _table_rows(block: Block) -> List[List[str]]:
    return [child.cells for child in block.children if child.type == BlockType.TABLE_ROW]


def parse_table(block: Block, ids) -> Optional[TableSection]:
    """
    Convert a table block into a typed section.

    ``ids`` is the caller's section id allocator. Returns None for unknown,
    empty or header-only tables.
    """
    rows = _table_rows(block)
    if not rows:
        return None

    headers = rows[0]
    table_type = detect_table_type(headers)
    lower_headers = [h.lower() for h in headers]
    data_rows = rows[1:]
    if not data_rows:
        logger.debug(f"Table {block.id}: header row only, skipped")
        return None

    if table_type == TableType.TIMELINE:
        time_i = _column_index(lower_headers, TIME_COLUMN)
        activity_i = _column_index(lower_headers, ACTIVITY_COLUMN)
        duration_i = _column_index(lower_headers, DURATION_COLUMN)
        notes_i = _column_index(lower_headers, NOTES_COLUMN)
        timeline_rows = [
            TimelineRow(
                time=_cell(cells, time_i),
                activity=_cell(cells, activity_i),
                duration=_cell(cells, duration_i),
                notes=_cell(cells, notes_i) or None,
            )
            for cells in data_rows
        ]
        logger.debug(f"Table {block.id}: timeline with {len(timeline_rows)} rows")
        return TimelineSection(id=ids.allocate(block.id), rows=timeline_rows)

    if table_type == TableType.VOCABULARY:
        term_i = _column_index(lower_headers, TERM_COLUMN)
        definition_i = _column_index(lower_headers, DEFINITION_COLUMN)
        terms = [
            VocabularyTerm(term=_cell(cells, term_i), definition=_cell(cells, definition_i))
            for cells in data_rows
        ]
        logger.debug(f"Table {block.id}: vocabulary with {len(terms)} terms")
        return VocabularySection(id=ids.allocate(block.id), terms=terms)

    if table_type == TableType.CHECKLIST:
        item_i = _column_index(lower_headers, ITEM_COLUMN)
        quantity_i = _column_index(lower_headers, QUANTITY_COLUMN)
        items = [
            ChecklistItem(text=_cell(cells, item_i), quantity=_cell(cells, quantity_i) or None)
            for cells in data_rows
        ]
        logger.debug(f"Table {block.id}: checklist with {len(items)} items")
        return ChecklistSection(
            id=ids.allocate(block.id),
            category="materials",
            title="Materials",
            items=items,
        )

    logger.debug(f"Table {block.id}: unrecognised headers {headers}, skipped")
    return None


def table_to_raw(block: Block) -> Optional[EmbeddedTable]:
    """Headers plus data rows, kept as-is for tables inside a teaching step."""
    rows = _table_rows(block)
    if not rows:
        return None
    return EmbeddedTable(headers=rows[0], rows=rows[1:])
