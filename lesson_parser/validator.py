"""
Output contract check: the wire form of parsed sections against a JSON
schema generated from the section models.
"""
import logging
from typing import Any, Dict, List

from jsonschema import validate, ValidationError
from pydantic import TypeAdapter

from lesson_parser.section_models import ContentSection, SectionModel, sections_to_dicts

logger = logging.getLogger(__name__)

SECTION_LIST_SCHEMA: Dict[str, Any] = TypeAdapter(List[ContentSection]).json_schema(by_alias=True)


class SectionValidator:
    """
    Enforces the section list schema consumed by the renderers.
    """
    def __init__(self, schema: Dict[str, Any] = SECTION_LIST_SCHEMA):
        self.schema = schema

    def validate(self, sections: List[SectionModel]) -> bool:
        """
        Validates the serialized sections.
        Raises ValidationError if validation fails.
        """
        return self.validate_payload(sections_to_dicts(sections))

    def validate_payload(self, payload: List[Dict[str, Any]]) -> bool:
        try:
            validate(instance=payload, schema=self.schema)
            return True
        except ValidationError as e:
            logger.error(f"Section list failed validation at {list(e.absolute_path)}: {e.message}")
            raise e
