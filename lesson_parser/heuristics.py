"""
Text heuristics used by the lesson parser.

Every function here is a pure string -> value mapping that never raises.
When a pattern does not match, callers fall back to a simpler
classification (usually prose).
"""
import re
from typing import List, Optional, NamedTuple

from notion_blocks.blocks import Block, extract_text, to_rich_text

# ---------------------------------------------------------------------------
# Keyword families
# ---------------------------------------------------------------------------

SAFETY_KEYWORDS = [
    "safety",
    "warning",
    "caution",
    "danger",
    "hazard",
    "critical",
    "important",
    "alert",
    "risk",
]
SAFETY_EMOJIS = ["⚠️", "\U0001f534", "❗", "\U0001f6a8", "⛔", "☠️", "\U0001f480", "\U0001f525"]

CHECKLIST_HEADING_PATTERNS = [
    "materials",
    "tools",
    "equipment",
    "what you'll need",
    "what you will need",
    "you will need",
    "resources needed",
    "supplies",
    "items needed",
    "requirements",
    "things you need",
    "preparation materials",
    "kit list",
    # setup / prep checklists
    "setup",
    "set up",
    "room setup",
    "considerations",
    "checklist",
    "pre-session",
    "before you start",
    "preparation",
    "prep list",
]

OUTCOMES_HEADING_PATTERNS = [
    "learning outcomes",
    "learning objectives",
    "objectives",
    "by the end",
    "learners will",
    "students will",
    "you will learn",
    "what you will learn",
    "goals",
    "outcomes",
    "aims",
]

CHECKPOINT_HEADING_PATTERNS = [
    "what to look for",
    "quality check",
    "assessment",
    "checkpoint",
    "success criteria",
    "evaluation",
    "criteria",
    "check points",
    "quality criteria",
    "signs of success",
    "how to assess",
    "verification",
]

TEACHING_STEPS_HEADING_PATTERNS = [
    "what to do",
    "instructions",
    "procedure",
    "steps",
    "method",
    "how to",
    "process",
    "directions",
    "guide",
    "tutorial",
    "activity",
    "demonstration",
]

VIDEO_HOSTS = ["youtube", "vimeo", "loom"]

SAFETY_COLORS = ("red", "yellow", "orange")

WORD_NUMBERS = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
}

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

QUANTITY_SUFFIX = re.compile(r"^(.+?)\s*[x×]\s*(\d+)$", re.IGNORECASE)
QUANTITY_PREFIX = re.compile(r"^(\d+)\s*[x×]\s*(.+)$", re.IGNORECASE)
QUANTITY_PARENS = re.compile(r"^\((\d+)\)\s*(.+)$")
QUANTITY_LEADING = re.compile(r"^(\d+)\s+(.+)$")

STEP_NUMBER = re.compile(r"^step\s+(\d+)[:.]", re.IGNORECASE)
STEP_NUMBER_BARE = re.compile(r"^(\d+)\.\s")
STEP_NUMBER_WORD = re.compile(r"^step\s+(one|two|three|four|five|six|seven|eight|nine|ten)[:.]", re.IGNORECASE)

EXPLICIT_STEP = re.compile(r"^(?:step|section)\s+\d+[:.]", re.IGNORECASE)
STEP_PREFIX = re.compile(r"^(?:(?:step|section)\s+\d+[:.]\s*|\d+\.\s*)", re.IGNORECASE)

DURATION_PARENS = re.compile(r"\(([~≈]?\s*\d+\s*(?:minutes?|mins?))\)", re.IGNORECASE)
DURATION_BARE = re.compile(r"([~≈]?\s*\d+\s*(?:minutes?|mins?))", re.IGNORECASE)
ACTIVITY_WITH_DURATION = re.compile(r"^(.+?)\s*\(([~≈]?\s*\d+\s*(?:minutes?|mins?))\)\s*$", re.IGNORECASE)

SECTION_KEYWORDS = "section|day|session|part|lesson|phase|module|week|unit|stage"
NUMBERED_HEADING = re.compile(r"^(\d+)\.\s+(.+)$")
# Only emoji / pictograph ranges; digits and letters must survive
LEADING_EMOJI = re.compile(
    "^[\\s\U0001F300-\U0001F9FF☀-⛿✀-➿⏱️]+"
)
KEYWORD_HEADING = re.compile(
    rf"^(?:{SECTION_KEYWORDS})\s+(\d+)\s*[:.\-–—]\s*(.+)$", re.IGNORECASE
)
KEYWORD_RANGE_HEADING = re.compile(
    rf"^(?:{SECTION_KEYWORDS})s?\s+(\d+)\s*[-–—]\s*\d+\s*[:.\-–—]\s*(.+)$", re.IGNORECASE
)

TEACHING_APPROACH_INLINE = re.compile(r"^teaching\s*approach\s*[:.\-–—]\s*(.+)$", re.IGNORECASE | re.DOTALL)
DIFFERENTIATION_INLINE = re.compile(r"^differentiation\s*[:.\-–—]\s*(.+)$", re.IGNORECASE | re.DOTALL)
TEACHING_APPROACH_LEAD = re.compile(r"^teaching\s*approach\s*[:.\-–—]?\s*", re.IGNORECASE)
DIFFERENTIATION_LEAD = re.compile(r"^differentiation\s*[:.\-–—]?\s*", re.IGNORECASE)

TEACHING_APPROACH = "teaching-approach"
DIFFERENTIATION = "differentiation"


class QuantityMatch(NamedTuple):
    text: str
    quantity: Optional[str] = None


class SectionHeadingMatch(NamedTuple):
    section_number: int
    title: str


class ParsedActivity(NamedTuple):
    text: str
    duration: Optional[str] = None


class InstructorNote(NamedTuple):
    kind: Optional[str]  # TEACHING_APPROACH, DIFFERENTIATION or None
    content: str


def _contains_any(text: str, patterns: List[str]) -> bool:
    lower_text = text.lower()
    return any(pattern in lower_text for pattern in patterns)


# ---------------------------------------------------------------------------
# Content detection
# ---------------------------------------------------------------------------

def is_safety_content(text: str) -> bool:
    """True when the text carries a safety keyword or a warning emoji."""
    return _contains_any(text, SAFETY_KEYWORDS) or any(emoji in text for emoji in SAFETY_EMOJIS)


def is_safety_color(color: str) -> bool:
    return any(name in color.lower() for name in SAFETY_COLORS)


def is_checklist_heading(text: str) -> bool:
    return _contains_any(text, CHECKLIST_HEADING_PATTERNS)


def is_outcomes_heading(text: str) -> bool:
    return _contains_any(text, OUTCOMES_HEADING_PATTERNS)


def is_checkpoint_heading(text: str) -> bool:
    return _contains_any(text, CHECKPOINT_HEADING_PATTERNS)


def is_teaching_steps_heading(text: str) -> bool:
    return _contains_any(text, TEACHING_STEPS_HEADING_PATTERNS)


def get_safety_level_from_color(color: str) -> str:
    """
    Map a Notion callout color (e.g. "red_background") to a safety level.
    red -> critical, yellow/orange -> warning, anything else -> caution.
    """
    lower_color = color.lower()
    if "red" in lower_color:
        return "critical"
    if "yellow" in lower_color or "orange" in lower_color:
        return "warning"
    return "caution"


def get_checklist_category(text: str) -> str:
    lower_text = text.lower()
    if "tool" in lower_text:
        return "tools"
    if "equipment" in lower_text:
        return "equipment"
    if "prepar" in lower_text or "before" in lower_text:
        return "preparation"
    return "materials"


def is_video_url(url: str) -> bool:
    return any(host in url for host in VIDEO_HOSTS)


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------

def extract_quantity(text: str) -> QuantityMatch:
    """
    Split a checklist item into text and quantity.

    - "Bamboo poles x 4" -> ("Bamboo poles", "4")
    - "4x Clamps"        -> ("Clamps", "4")
    - "(2) Drill bits"   -> ("Drill bits", "2")
    - "3 Sanding blocks" -> ("Sanding blocks", "3")
    """
    match = QUANTITY_SUFFIX.match(text)
    if match:
        return QuantityMatch(match.group(1).strip(), match.group(2))

    match = QUANTITY_PREFIX.match(text)
    if match:
        return QuantityMatch(match.group(2).strip(), match.group(1))

    match = QUANTITY_PARENS.match(text)
    if match:
        return QuantityMatch(match.group(2).strip(), match.group(1))

    match = QUANTITY_LEADING.match(text)
    if match:
        return QuantityMatch(match.group(2).strip(), match.group(1))

    return QuantityMatch(text.strip())


def extract_step_number(text: str) -> Optional[int]:
    """
    "Step 1: Do this" -> 1, "1. Do this" -> 1, "Step One: Do this" -> 1.
    Returns None when no step number is present.
    """
    match = STEP_NUMBER.match(text)
    if match:
        return int(match.group(1))

    match = STEP_NUMBER_BARE.match(text)
    if match:
        return int(match.group(1))

    match = STEP_NUMBER_WORD.match(text)
    if match:
        return WORD_NUMBERS[match.group(1).lower()]

    return None


def extract_duration(text: str) -> Optional[str]:
    """
    Find a minutes duration: "(5 mins)" -> "5 mins", "~15 min" -> "~15 min".
    Parenthesised durations win over bare ones.
    """
    match = DURATION_PARENS.search(text)
    if match:
        return match.group(1).strip()

    match = DURATION_BARE.search(text)
    if match:
        return match.group(1).strip()

    return None


def strip_duration(text: str) -> str:
    """Text with every minutes duration removed, used to spot duration-only lines."""
    return DURATION_BARE.sub("", text).strip()


def is_explicit_step(text: str) -> bool:
    """A numbered item that spells out its own "Step N:" / "Section N:" prefix."""
    return bool(EXPLICIT_STEP.match(text))


def strip_step_prefix(text: str) -> str:
    return STEP_PREFIX.sub("", text, count=1)


def match_section_heading(text: str) -> Optional[SectionHeadingMatch]:
    """
    Recognise guided-step headings:

    - "3. Key Geometry Concepts"            -> (3, "Key Geometry Concepts")
    - "SECTION 1: Introduction"             -> (1, "Introduction")
    - "\U0001F50D Day 1: Design & Preparation" -> (1, "Design & Preparation")
    - "Lessons 11-15: Components"           -> (11, "Components")
    """
    # Numbered form first: emoji stripping must never see the leading digits
    match = NUMBERED_HEADING.match(text.strip())
    if match:
        return SectionHeadingMatch(int(match.group(1)), match.group(2).strip())

    clean_text = LEADING_EMOJI.sub("", text).strip()

    match = KEYWORD_HEADING.match(clean_text)
    if match:
        return SectionHeadingMatch(int(match.group(1)), match.group(2).strip())

    match = KEYWORD_RANGE_HEADING.match(clean_text)
    if match:
        return SectionHeadingMatch(int(match.group(1)), match.group(2).strip())

    return None


def parse_activity_with_duration(text: str) -> ParsedActivity:
    """"Welcome and introduction (2 min)" -> ("Welcome and introduction", "2 min")."""
    match = ACTIVITY_WITH_DURATION.match(text)
    if match:
        return ParsedActivity(match.group(1).strip(), match.group(2).strip())
    return ParsedActivity(text.strip())


def parse_instructor_note(text: str) -> InstructorNote:
    """
    Detect "Teaching Approach: ..." and "Differentiation: ..." notes, either
    as an inline prefix or as a leading keyword (multi-block notes).
    """
    match = TEACHING_APPROACH_INLINE.match(text)
    if match:
        return InstructorNote(TEACHING_APPROACH, match.group(1).strip())

    match = DIFFERENTIATION_INLINE.match(text)
    if match:
        return InstructorNote(DIFFERENTIATION, match.group(1).strip())

    lower_text = text.lower()
    if lower_text.startswith("teaching approach"):
        return InstructorNote(TEACHING_APPROACH, TEACHING_APPROACH_LEAD.sub("", text, count=1).strip())
    if lower_text.startswith("differentiation"):
        return InstructorNote(DIFFERENTIATION, DIFFERENTIATION_LEAD.sub("", text, count=1).strip())

    return InstructorNote(None, text)


def split_safety_title(text: str):
    """
    "Warning: Keep hands clear" -> ("Warning", "Keep hands clear").
    Only a colon inside the first 50 characters starts a title.
    """
    colon_index = text.find(":")
    if 0 < colon_index < 50:
        return text[:colon_index].strip(), text[colon_index + 1:].strip()
    return None, text


def extract_any_text(block: Block) -> Optional[str]:
    """Fallback for unrecognised blocks: try rich_text, then caption."""
    for key in ("rich_text", "caption"):
        value = block.payload.get(key)
        if isinstance(value, list):
            text = extract_text(to_rich_text(value))
            if text.strip():
                return text
    return None
