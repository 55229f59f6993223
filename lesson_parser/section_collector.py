import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from notion_blocks.blocks import Block, BlockType
from lesson_parser.heuristics import (
    DIFFERENTIATION,
    TEACHING_APPROACH,
    extract_duration,
    is_video_url,
    match_section_heading,
    parse_activity_with_duration,
    parse_instructor_note,
    strip_duration,
)
from lesson_parser.section_models import Activity, EmbeddedResource, EmbeddedTable
from lesson_parser.tables import table_to_raw

logger = logging.getLogger(__name__)

# Paragraphs shorter than this once the duration is removed count as a duration line
DURATION_LINE_MAX_REST = 20

BULLET_PREFIXES = ("•", "-", "*")
BULLET_MARK = re.compile(r"^[•\-*]\s*")
LIST_ITEM_TYPES = (BlockType.BULLETED_LIST_ITEM, BlockType.NUMBERED_LIST_ITEM, BlockType.TO_DO)


@dataclass
class SectionContent:
    instruction: str = ""
    duration: Optional[str] = None
    activities: List[Activity] = field(default_factory=list)
    teaching_approach: Optional[str] = None
    differentiation: Optional[str] = None
    tips: List[str] = field(default_factory=list)
    paragraphs: List[str] = field(default_factory=list)
    resources: List[EmbeddedResource] = field(default_factory=list)
    tables: List[EmbeddedTable] = field(default_factory=list)
    quotes: List[str] = field(default_factory=list)
    end_index: int = 0


def _activity(text: str) -> Activity:
    parsed = parse_activity_with_duration(text)
    return Activity(text=parsed.text, duration=parsed.duration)


def is_section_boundary(block: Block) -> bool:
    """A guided-step heading or any top-level heading ends the current section."""
    if not block.is_heading:
        return False
    if block.type == BlockType.HEADING_1:
        return True
    return match_section_heading(block.text) is not None


class SectionContentCollector:
    """
    Gathers everything that belongs to one guided-step heading: the blocks
    after it up to the next boundary heading.
    """

    def __init__(self):
        self.content = SectionContent()

    def collect(self, blocks: List[Block], start_index: int) -> SectionContent:
        self._reset()

        index = start_index
        while index < len(blocks):
            block = blocks[index]
            if is_section_boundary(block):
                break
            self._process_block(block)
            index += 1

        self.content.end_index = index
        logger.debug(
            f"Collected blocks {start_index}..{index}: "
            f"{len(self.content.activities)} activities, {len(self.content.paragraphs)} paragraphs"
        )
        return self.content

    def _reset(self):
        self.content = SectionContent()

    def _apply_note(self, text: str) -> bool:
        note = parse_instructor_note(text)
        if note.kind == TEACHING_APPROACH:
            self.content.teaching_approach = note.content
            return True
        if note.kind == DIFFERENTIATION:
            self.content.differentiation = note.content
            return True
        return False

    def _process_block(self, block: Block):
        block_type = block.type
        content = self.content

        if block_type == BlockType.PARAGRAPH:
            self._process_paragraph(block.text)

        elif block_type == BlockType.BULLETED_LIST_ITEM:
            content.activities.append(_activity(block.text))
            for child in block.children:
                if child.type == BlockType.BULLETED_LIST_ITEM:
                    content.activities.append(_activity(child.text))

        elif block_type == BlockType.NUMBERED_LIST_ITEM:
            content.activities.append(_activity(block.text))
            for child in block.children:
                if child.type in (BlockType.BULLETED_LIST_ITEM, BlockType.NUMBERED_LIST_ITEM):
                    content.activities.append(_activity(child.text))

        elif block_type == BlockType.TO_DO:
            content.activities.append(_activity(block.text))

        elif block_type == BlockType.CALLOUT:
            if block.text.strip():
                content.tips.append(block.text)

        elif block_type == BlockType.QUOTE:
            if block.text.strip():
                content.quotes.append(block.text)

        elif block_type in (BlockType.IMAGE, BlockType.VIDEO):
            content.resources.append(EmbeddedResource(
                type=block_type.value,
                url=block.url,
                caption=block.caption_text or None,
            ))

        elif block_type in (BlockType.FILE, BlockType.PDF):
            content.resources.append(EmbeddedResource(
                type=block_type.value,
                url=block.url,
                title=block.name,
                caption=block.caption_text or None,
            ))

        elif block_type == BlockType.EMBED:
            url = block.url
            content.resources.append(EmbeddedResource(
                type="video" if is_video_url(url) else "embed",
                url=url,
                caption=block.caption_text or None,
            ))

        elif block_type == BlockType.TABLE:
            table = table_to_raw(block)
            if table:
                content.tables.append(table)

        elif block_type == BlockType.TOGGLE:
            self._process_toggle(block)

        # Other block types are skipped

    def _process_paragraph(self, text: str):
        if self._apply_note(text):
            return

        content = self.content
        duration = extract_duration(text)
        if duration and len(strip_duration(text)) < DURATION_LINE_MAX_REST:
            # First duration line wins; later ones are consumed
            if not content.duration:
                content.duration = duration
            return

        if text.strip():
            content.paragraphs.append(text)
            if not content.instruction:
                content.instruction = text

    def _process_toggle(self, block: Block):
        """Toggles hold "What you'll need" style lists and instructor notes."""
        self._apply_note(block.text)

        for child in block.children:
            if child.type in LIST_ITEM_TYPES:
                self.content.activities.append(_activity(child.text))
            elif child.type == BlockType.PARAGRAPH:
                text = child.text
                if self._apply_note(text) or not text.strip():
                    continue
                # Bullet-like paragraphs pasted as plain text
                if text.startswith(BULLET_PREFIXES):
                    self.content.activities.append(_activity(BULLET_MARK.sub("", text, count=1)))
                else:
                    self.content.paragraphs.append(text)


def collect_section_content(blocks: List[Block], start_index: int) -> SectionContent:
    """Collect the content of a guided step starting right after its heading."""
    return SectionContentCollector().collect(blocks, start_index)
