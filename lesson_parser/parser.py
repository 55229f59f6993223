"""
Block parser: turns an ordered list of Notion blocks into typed lesson
sections for the prep-mode and teaching-mode views.

Each scan position is offered to the handlers in priority order (callout,
table, heading, numbered item, media, prose text, divider, toggle, fallback)
and the first match consumes one or more blocks. Plain text accumulates in a
prose buffer that is flushed into a single prose section whenever a
structured section starts.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set, Dict, Any

from notion_blocks.blocks import Block, BlockType, blocks_from_dicts
from lesson_parser.heuristics import (
    extract_any_text,
    extract_duration,
    extract_quantity,
    extract_step_number,
    get_checklist_category,
    get_safety_level_from_color,
    is_checklist_heading,
    is_checkpoint_heading,
    is_explicit_step,
    is_outcomes_heading,
    is_safety_color,
    is_safety_content,
    is_video_url,
    match_section_heading,
    split_safety_title,
    strip_step_prefix,
)
from lesson_parser.reorder import reorder_for_teaching
from lesson_parser.section_collector import collect_section_content
from lesson_parser.section_models import (
    ChecklistItem,
    ChecklistSection,
    CheckpointItem,
    CheckpointSection,
    ContentSection,
    HeadingSection,
    OutcomesSection,
    ProseSection,
    ResourceSection,
    SafetySection,
    TeachingStepSection,
)
from lesson_parser.tables import parse_table

logger = logging.getLogger(__name__)

PROSE_SEPARATOR = "\n\n"
GENERATED_ID_PREFIX = "section"

# Minimum list length after a heading for each heading + list pattern
MIN_CHECKLIST_ITEMS = 1
MIN_OUTCOMES_ITEMS = 2
MIN_CHECKPOINT_ITEMS = 2

HEADING_LIST_TYPES = (BlockType.BULLETED_LIST_ITEM, BlockType.TO_DO)
MEDIA_TYPES = (BlockType.IMAGE, BlockType.VIDEO, BlockType.PDF, BlockType.FILE, BlockType.EMBED)
TEXT_TYPES = (
    BlockType.PARAGRAPH,
    BlockType.QUOTE,
    BlockType.BULLETED_LIST_ITEM,
    BlockType.TO_DO,
    BlockType.CODE,
)


class SectionIdAllocator:
    """
    Hands out section ids for one parse call. A block's own id is used the
    first time it is seen; repeats and blockless sections get ``section-<n>``.
    """

    def __init__(self):
        self.used: Set[str] = set()
        self.counter = 0

    def allocate(self, block_id: Optional[str] = None) -> str:
        if block_id and block_id not in self.used:
            self.used.add(block_id)
            return block_id

        while True:
            self.counter += 1
            candidate = f"{GENERATED_ID_PREFIX}-{self.counter}"
            if candidate not in self.used:
                self.used.add(candidate)
                return candidate


@dataclass
class ParserState:
    ids: SectionIdAllocator
    sections: List[ContentSection] = field(default_factory=list)
    prose_buffer: List[str] = field(default_factory=list)
    step_counter: int = 0
    index: int = 0

    def flush_prose(self):
        if not self.prose_buffer:
            return
        self.sections.append(ProseSection(
            id=self.ids.allocate(),
            content=PROSE_SEPARATOR.join(self.prose_buffer),
        ))
        self.prose_buffer = []


class BlockParser:
    """
    Single-use scanner. Toggle children are scanned by a nested parser that
    shares the id allocator but keeps its own prose buffer and step counter.
    """

    def __init__(self, ids: Optional[SectionIdAllocator] = None):
        self.ids = ids or SectionIdAllocator()

    def scan(self, blocks: List[Block]) -> List[ContentSection]:
        state = ParserState(ids=self.ids)
        while state.index < len(blocks):
            self._process_block(state, blocks)
        state.flush_prose()
        return state.sections

    def _process_block(self, state: ParserState, blocks: List[Block]):
        block = blocks[state.index]
        block_type = block.type

        if block_type == BlockType.CALLOUT:
            self._handle_callout(state, block)

        elif block_type == BlockType.TABLE:
            state.flush_prose()
            section = parse_table(block, self.ids)
            if section:
                state.sections.append(section)
            state.index += 1

        elif block.is_heading:
            self._handle_heading(state, blocks)

        elif block_type == BlockType.NUMBERED_LIST_ITEM:
            self._handle_numbered(state, blocks)

        elif block_type in MEDIA_TYPES:
            state.flush_prose()
            state.sections.append(self._resource_section(block))
            state.index += 1

        elif block_type in TEXT_TYPES:
            line = self._prose_line(block)
            if line:
                state.prose_buffer.append(line)
            state.index += 1

        elif block_type == BlockType.DIVIDER:
            state.flush_prose()
            state.index += 1

        elif block_type == BlockType.TOGGLE:
            state.flush_prose()
            state.sections.append(HeadingSection(id=self.ids.allocate(block.id), level=3, text=block.text))
            if block.children:
                state.sections.extend(BlockParser(self.ids).scan(block.children))
            state.index += 1

        else:
            text = extract_any_text(block)
            if text:
                state.prose_buffer.append(text)
            else:
                logger.debug(f"Skipping {block.raw_type or block_type.value} block {block.id}: no text")
            state.index += 1

    # -- callouts ------------------------------------------------------------

    def _handle_callout(self, state: ParserState, block: Block):
        state.index += 1
        text = block.text
        color = block.color

        if not (is_safety_content(text) or is_safety_color(color)):
            if text.strip():
                state.prose_buffer.append(text)
            return

        items = [
            child.text for child in block.children
            if child.type in HEADING_LIST_TYPES and child.text.strip()
        ]

        state.flush_prose()
        title, content = split_safety_title(text)
        state.sections.append(SafetySection(
            id=self.ids.allocate(block.id),
            level=get_safety_level_from_color(color),
            title=title or None,
            content=content,
            items=items or None,
        ))
        logger.debug(f"Callout {block.id} ({color or 'default'}) -> safety")

    # -- headings ------------------------------------------------------------

    def _handle_heading(self, state: ParserState, blocks: List[Block]):
        block = blocks[state.index]
        text = block.text

        section_match = match_section_heading(text)
        if section_match:
            state.flush_prose()
            content = collect_section_content(blocks, state.index + 1)
            state.sections.append(TeachingStepSection(
                id=self.ids.allocate(block.id),
                step_number=section_match.section_number,
                title=section_match.title,
                instruction=content.instruction or section_match.title,
                duration=content.duration,
                activities=content.activities or None,
                teaching_approach=content.teaching_approach,
                differentiation=content.differentiation,
                tips=content.tips or None,
                paragraphs=content.paragraphs or None,
                resources=content.resources or None,
                tables=content.tables or None,
                quotes=content.quotes or None,
            ))
            logger.debug(f"Heading {text!r} -> teaching step {section_match.section_number}")
            state.index = content.end_index
            return

        run_length, items = self._following_list_items(blocks, state.index + 1)
        section = self._heading_list_section(block, items)
        if section:
            state.flush_prose()
            state.sections.append(section)
            logger.debug(f"Heading {text!r} + {run_length} list items -> {section.type}")
            state.index += 1 + run_length
            return

        state.flush_prose()
        level = block.heading_level
        state.sections.append(HeadingSection(id=self.ids.allocate(block.id), level=level, text=text))
        if level <= 2:
            state.step_counter = 0
        state.index += 1

    def _following_list_items(self, blocks: List[Block], start: int):
        """Length of the bulleted/to-do run starting at ``start`` and its non-empty texts."""
        end = start
        while end < len(blocks) and blocks[end].type in HEADING_LIST_TYPES:
            end += 1
        items = [b.text for b in blocks[start:end] if b.text.strip()]
        return end - start, items

    def _heading_list_section(self, block: Block, items: List[str]) -> Optional[ContentSection]:
        text = block.text

        if len(items) >= MIN_CHECKLIST_ITEMS and is_checklist_heading(text):
            checklist_items = []
            for item in items:
                match = extract_quantity(item)
                checklist_items.append(ChecklistItem(text=match.text, quantity=match.quantity))
            return ChecklistSection(
                id=self.ids.allocate(block.id),
                category=get_checklist_category(text),
                title=text,
                items=checklist_items,
            )

        if len(items) >= MIN_OUTCOMES_ITEMS and is_outcomes_heading(text):
            return OutcomesSection(id=self.ids.allocate(block.id), title=text, items=items)

        if len(items) >= MIN_CHECKPOINT_ITEMS and is_checkpoint_heading(text):
            return CheckpointSection(
                id=self.ids.allocate(block.id),
                title=text,
                items=[CheckpointItem(criterion=item) for item in items],
            )

        return None

    # -- numbered lists ------------------------------------------------------

    def _handle_numbered(self, state: ParserState, blocks: List[Block]):
        block = blocks[state.index]
        text = block.text

        if is_explicit_step(text):
            state.flush_prose()
            state.step_counter += 1

            tips = []
            warnings = []
            for child in block.children:
                if child.type != BlockType.BULLETED_LIST_ITEM:
                    continue
                if is_safety_content(child.text):
                    warnings.append(child.text)
                else:
                    tips.append(child.text)

            state.sections.append(TeachingStepSection(
                id=self.ids.allocate(block.id),
                step_number=extract_step_number(text) or state.step_counter,
                instruction=strip_step_prefix(text),
                duration=extract_duration(text),
                tips=tips or None,
                warnings=warnings or None,
            ))
            state.index += 1
            return

        # A plain numbered list stays prose, numbered from 1
        lines = []
        item_number = 1
        while state.index < len(blocks):
            item = blocks[state.index]
            if item.type != BlockType.NUMBERED_LIST_ITEM or is_explicit_step(item.text):
                break
            lines.append(f"{item_number}. {item.text}")
            for child in item.children:
                if child.type == BlockType.BULLETED_LIST_ITEM:
                    lines.append(f"   • {child.text}")
                elif child.type == BlockType.PARAGRAPH:
                    lines.append(f"   {child.text}")
            item_number += 1
            state.index += 1

        state.prose_buffer.append("\n".join(lines))

    # -- media and text ------------------------------------------------------

    def _resource_section(self, block: Block) -> ResourceSection:
        block_type = block.type
        url = block.url
        title = None

        if block_type == BlockType.EMBED:
            if is_video_url(url):
                resource_type = "video"
            elif url.endswith(".pdf"):
                resource_type = "pdf"
            else:
                resource_type = "file"
        else:
            resource_type = block_type.value
            if block_type in (BlockType.PDF, BlockType.FILE):
                title = block.name

        return ResourceSection(
            id=self.ids.allocate(block.id),
            resource_type=resource_type,
            url=url,
            title=title,
            caption=block.caption_text or None,
        )

    def _prose_line(self, block: Block) -> Optional[str]:
        text = block.text
        if not text.strip():
            return None

        block_type = block.type
        if block_type == BlockType.QUOTE:
            return f"> {text}"
        if block_type == BlockType.BULLETED_LIST_ITEM:
            return f"• {text}"
        if block_type == BlockType.TO_DO:
            mark = "☑" if block.checked else "☐"
            return f"{mark} {text}"
        if block_type == BlockType.CODE:
            return f"```{block.language}\n{text}\n```"
        return text


def scan_blocks(blocks: List[Block]) -> List[ContentSection]:
    """Classify blocks in page order, without teaching-order reordering."""
    return BlockParser().scan(blocks)


def parse_blocks(blocks: List[Block]) -> List[ContentSection]:
    """
    Parse a page's root blocks into sections in delivery order.
    Pure and deterministic: the same blocks always give the same sections
    and ids.
    """
    sections = scan_blocks(blocks)
    logger.debug(f"Scanned {len(blocks)} root blocks into {len(sections)} sections")
    return reorder_for_teaching(sections)


def parse_raw_blocks(raw_blocks: List[Dict[str, Any]]) -> List[ContentSection]:
    """Parse raw Notion block JSON, as returned by the blocks API with children attached."""
    return parse_blocks(blocks_from_dicts(raw_blocks))
