from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional, Union, Literal, Dict, Any, Annotated

SafetyLevel = Literal["critical", "warning", "caution"]
ChecklistCategory = Literal["materials", "tools", "equipment", "preparation"]
ResourceType = Literal["image", "video", "pdf", "file"]
EmbeddedResourceType = Literal["image", "video", "pdf", "file", "embed"]


class SectionModel(BaseModel):
    """Shared config: immutable, snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


# -- nested value types ------------------------------------------------------

class TimelineRow(SectionModel):
    time: str
    activity: str
    duration: str
    notes: Optional[str] = None


class ChecklistItem(SectionModel):
    text: str
    quantity: Optional[str] = None


class CheckpointItem(SectionModel):
    criterion: str
    description: Optional[str] = None


class Activity(SectionModel):
    text: str
    duration: Optional[str] = None


class EmbeddedResource(SectionModel):
    type: EmbeddedResourceType
    url: str
    title: Optional[str] = None
    caption: Optional[str] = None


class EmbeddedTable(SectionModel):
    headers: List[str]
    rows: List[List[str]]


class VocabularyTerm(SectionModel):
    term: str
    definition: str


# -- sections ----------------------------------------------------------------

class SafetySection(SectionModel):
    id: str
    type: Literal["safety"] = "safety"
    level: SafetyLevel = Field(description="Severity derived from the callout color")
    title: Optional[str] = None
    content: str
    items: Optional[List[str]] = None


class TimelineSection(SectionModel):
    id: str
    type: Literal["timeline"] = "timeline"
    rows: List[TimelineRow]


class ChecklistSection(SectionModel):
    id: str
    type: Literal["checklist"] = "checklist"
    category: ChecklistCategory
    title: str
    items: List[ChecklistItem]


class OutcomesSection(SectionModel):
    id: str
    type: Literal["outcomes"] = "outcomes"
    title: str
    items: List[str]


class CheckpointSection(SectionModel):
    id: str
    type: Literal["checkpoint"] = "checkpoint"
    title: str
    items: List[CheckpointItem]


class TeachingStepSection(SectionModel):
    id: str
    type: Literal["teaching-step"] = "teaching-step"
    step_number: int
    title: Optional[str] = None
    instruction: str
    duration: Optional[str] = None
    activities: Optional[List[Activity]] = None
    teaching_approach: Optional[str] = Field(default=None, description="Teaching approach notes for instructors")
    differentiation: Optional[str] = Field(default=None, description="Guidance for different learner levels")
    tips: Optional[List[str]] = None
    warnings: Optional[List[str]] = None
    paragraphs: Optional[List[str]] = None
    resources: Optional[List[EmbeddedResource]] = None
    tables: Optional[List[EmbeddedTable]] = None
    quotes: Optional[List[str]] = Field(default=None, description="Quote blocks / key scripts for the instructor")


class VocabularySection(SectionModel):
    id: str
    type: Literal["vocabulary"] = "vocabulary"
    terms: List[VocabularyTerm]


class ResourceSection(SectionModel):
    id: str
    type: Literal["resource"] = "resource"
    resource_type: ResourceType
    url: str
    title: Optional[str] = None
    caption: Optional[str] = None


class ProseSection(SectionModel):
    id: str
    type: Literal["prose"] = "prose"
    content: str


class HeadingSection(SectionModel):
    id: str
    type: Literal["heading"] = "heading"
    level: Literal[1, 2, 3]
    text: str


# Tagged union consumed by the prep-mode and teaching-mode renderers
ContentSection = Annotated[
    Union[
        SafetySection,
        TimelineSection,
        ChecklistSection,
        OutcomesSection,
        CheckpointSection,
        TeachingStepSection,
        VocabularySection,
        ResourceSection,
        ProseSection,
        HeadingSection,
    ],
    Field(discriminator="type"),
]


def section_to_dict(section: SectionModel) -> Dict[str, Any]:
    """Wire form: camelCase keys, unset optional fields left out."""
    return section.model_dump(by_alias=True, exclude_none=True)


def sections_to_dicts(sections: List[SectionModel]) -> List[Dict[str, Any]]:
    return [section_to_dict(s) for s in sections]
