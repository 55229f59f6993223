"""
Content audit: compares what a page holds with what the parser captured.

Used by the operator CLI to spot content that silently fell through to
prose or was dropped. Media counted as captured may sit either in a
top-level resource section or embedded in a teaching step.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from notion_blocks.blocks import Block, BlockType
from lesson_parser.heuristics import is_safety_color, is_teaching_steps_heading
from lesson_parser.section_models import ContentSection

logger = logging.getLogger(__name__)

MEDIA_KINDS = ("video", "file", "image", "quote")

# Source block types counted under each media kind
SOURCE_KIND_TYPES = {
    "video": (BlockType.VIDEO,),
    "file": (BlockType.FILE, BlockType.PDF),
    "image": (BlockType.IMAGE,),
    "quote": (BlockType.QUOTE,),
}

# Resource types counted under each media kind
RESOURCE_KIND_TYPES = {
    "video": ("video",),
    "file": ("file", "pdf"),
    "image": ("image",),
}

QUOTE_PREFIX = "> "


@dataclass
class ContentAudit:
    block_counts: Dict[str, int] = field(default_factory=dict)
    callout_colors: List[str] = field(default_factory=list)
    section_counts: Dict[str, int] = field(default_factory=dict)
    source_media: Dict[str, int] = field(default_factory=dict)
    top_level_media: Dict[str, int] = field(default_factory=dict)
    embedded_media: Dict[str, int] = field(default_factory=dict)
    embedded_tables: int = 0
    successes: List[str] = field(default_factory=list)
    gaps: List[str] = field(default_factory=list)

    @property
    def total_blocks(self) -> int:
        return sum(self.block_counts.values())

    @property
    def total_sections(self) -> int:
        return sum(self.section_counts.values())

    def parsed_media(self, kind: str) -> int:
        return self.top_level_media.get(kind, 0) + self.embedded_media.get(kind, 0)

    def capture_rate(self, kind: str) -> float:
        """Parsed / source count for a media kind; 1.0 when the page has none."""
        source = self.source_media.get(kind, 0)
        if source == 0:
            return 1.0
        return self.parsed_media(kind) / source


def iter_blocks(blocks: Iterable[Block]) -> Iterable[Block]:
    """Depth-first walk over blocks and all their descendants."""
    for block in blocks:
        yield block
        yield from iter_blocks(block.children)


def _count_sections(audit: ContentAudit, sections: List[ContentSection]):
    section_counts: Counter = Counter()
    top_level: Counter = Counter()
    embedded: Counter = Counter()

    for section in sections:
        section_counts[section.type] += 1

        if section.type == "resource":
            for kind, types in RESOURCE_KIND_TYPES.items():
                if section.resource_type in types:
                    top_level[kind] += 1

        elif section.type == "prose":
            # Top-level quotes end up as "> " lines inside prose
            quotes = sum(1 for line in section.content.split("\n") if line.startswith(QUOTE_PREFIX))
            if quotes:
                top_level["quote"] += quotes

        elif section.type == "teaching-step":
            for resource in section.resources or []:
                for kind, types in RESOURCE_KIND_TYPES.items():
                    if resource.type in types:
                        embedded[kind] += 1
            if section.quotes:
                embedded["quote"] += len(section.quotes)
            audit.embedded_tables += len(section.tables or [])

    audit.section_counts = dict(section_counts)
    audit.top_level_media = dict(top_level)
    audit.embedded_media = dict(embedded)


def _check_media(audit: ContentAudit, kind: str):
    source = audit.source_media.get(kind, 0)
    if source == 0:
        return
    parsed = audit.parsed_media(kind)
    top_level = audit.top_level_media.get(kind, 0)
    embedded = audit.embedded_media.get(kind, 0)
    if parsed >= source:
        audit.successes.append(
            f"All {source} {kind}s captured ({top_level} top-level, {embedded} embedded)"
        )
    else:
        audit.gaps.append(f"{source} {kind}s in page but only {parsed} parsed")


def audit_content(blocks: List[Block], sections: List[ContentSection]) -> ContentAudit:
    audit = ContentAudit()

    block_counts: Counter = Counter()
    teaching_headings: List[str] = []
    for block in iter_blocks(blocks):
        block_counts[block.raw_type or block.type.value] += 1
        if block.type == BlockType.CALLOUT:
            audit.callout_colors.append(block.color or "default")
        if block.is_heading and is_teaching_steps_heading(block.text):
            teaching_headings.append(block.text)
    audit.block_counts = dict(block_counts)

    for kind in MEDIA_KINDS:
        audit.source_media[kind] = sum(block_counts.get(t.value, 0) for t in SOURCE_KIND_TYPES[kind])

    _count_sections(audit, sections)

    for kind in MEDIA_KINDS:
        _check_media(audit, kind)

    toggles = block_counts.get(BlockType.TOGGLE.value, 0)
    if toggles:
        if audit.section_counts.get("heading"):
            audit.successes.append(f"{toggles} toggles expanded into content")
        else:
            audit.gaps.append(f"{toggles} toggles not being captured")

    todos = block_counts.get(BlockType.TO_DO.value, 0)
    if todos:
        checklists = audit.section_counts.get("checklist", 0)
        if checklists:
            audit.successes.append(f"To-do items captured in {checklists} checklist section(s)")
        else:
            audit.gaps.append(f"{todos} to-do items not appearing in checklists")

    safety_callouts = sum(1 for color in audit.callout_colors if is_safety_color(color))
    if safety_callouts:
        safety_sections = audit.section_counts.get("safety", 0)
        if safety_sections:
            audit.successes.append(f"Safety callouts captured ({safety_sections} sections)")
        else:
            audit.gaps.append(f"{safety_callouts} safety-colored callouts not captured")

    steps = audit.section_counts.get("teaching-step", 0)
    if steps:
        audit.successes.append(f"{steps} teaching-step sections")
    elif teaching_headings:
        audit.gaps.append(
            f"{len(teaching_headings)} step-like headings but no teaching-step sections: "
            + ", ".join(repr(h) for h in teaching_headings[:3])
        )

    logger.debug(f"Audit: {len(audit.successes)} successes, {len(audit.gaps)} gaps")
    return audit
