from typing import List, Sequence

from lesson_parser.section_models import ContentSection


def apply_custom_section_order(
    sections: List[ContentSection], ordered_ids: Sequence[str]
) -> List[ContentSection]:
    """
    Overlay an instructor's saved order on top of the parsed order.

    Sections named in ``ordered_ids`` come first, in that order. Sections the
    saved order does not know about (new content in the page) keep their
    relative order and go at the end; ids that no longer exist are ignored.
    """
    if not ordered_ids:
        return list(sections)

    positions = {}
    for position, section_id in enumerate(ordered_ids):
        positions.setdefault(section_id, position)

    ordered = [s for s in sections if s.id in positions]
    unordered = [s for s in sections if s.id not in positions]
    ordered.sort(key=lambda s: positions[s.id])
    return ordered + unordered
