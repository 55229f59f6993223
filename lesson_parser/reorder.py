"""
Reorders parsed sections into the sequence an instructor delivers a lesson
in: safety first, then overview, timeline, materials, vocabulary, the
teaching steps themselves, assessment, resources and finally anything else.
"""
import logging
from enum import Enum
from typing import Dict, List, Optional

from lesson_parser.section_models import ContentSection

logger = logging.getLogger(__name__)


class TeachingGroup(Enum):
    """Buckets in delivery order."""
    SAFETY = "safety"
    OVERVIEW = "overview"
    TIMELINE = "timeline"
    MATERIALS = "materials"
    VOCABULARY = "vocabulary"
    TEACHING = "teaching"
    ASSESSMENT = "assessment"
    RESOURCES = "resources"
    OTHER = "other"


# Checked in this order; the first family with a keyword in the heading wins
HEADING_GROUP_KEYWORDS = [
    (TeachingGroup.OVERVIEW, ["objective", "overview", "goal", "learning outcome"]),
    (TeachingGroup.TIMELINE, ["timeline", "pacing", "schedule", "timing"]),
    (TeachingGroup.MATERIALS, ["material", "supplies", "equipment", "what you", "checklist"]),
    (TeachingGroup.VOCABULARY, ["vocabulary", "key term", "glossary", "definition"]),
    (TeachingGroup.TEACHING, ["section", "step", "activity", "instruction", "teaching"]),
    (TeachingGroup.ASSESSMENT, ["assessment", "checkpoint", "check for understanding", "evaluation"]),
    (TeachingGroup.RESOURCES, ["resource", "reference", "additional", "reflection"]),
]

# Typed sections land in a fixed bucket and leave the current group alone
SECTION_TYPE_GROUPS = {
    "safety": TeachingGroup.SAFETY,
    "timeline": TeachingGroup.TIMELINE,
    "checklist": TeachingGroup.MATERIALS,
    "vocabulary": TeachingGroup.VOCABULARY,
    "teaching-step": TeachingGroup.TEACHING,
    "outcomes": TeachingGroup.OVERVIEW,
    "checkpoint": TeachingGroup.ASSESSMENT,
    "resource": TeachingGroup.RESOURCES,
}


def heading_group(text: str) -> Optional[TeachingGroup]:
    lower_text = text.lower()
    for group, keywords in HEADING_GROUP_KEYWORDS:
        if any(keyword in lower_text for keyword in keywords):
            return group
    return None


def reorder_for_teaching(sections: List[ContentSection]) -> List[ContentSection]:
    """
    Stable bucket sort. Headings that name a group open it, and untyped
    sections (prose, generic headings) follow the most recently opened group.
    """
    buckets: Dict[TeachingGroup, List[ContentSection]] = {group: [] for group in TeachingGroup}
    current_group: Optional[TeachingGroup] = None

    for section in sections:
        if section.type == "heading":
            group = heading_group(section.text)
            if group is not None:
                current_group = group
            else:
                group = current_group or TeachingGroup.OTHER
            buckets[group].append(section)
            continue

        group = SECTION_TYPE_GROUPS.get(section.type)
        if group is None:
            group = current_group or TeachingGroup.OTHER
        buckets[group].append(section)

    ordered = [section for group in TeachingGroup for section in buckets[group]]
    logger.debug(
        "Reordered sections: "
        + ", ".join(f"{group.value}={len(buckets[group])}" for group in TeachingGroup if buckets[group])
    )
    return ordered
