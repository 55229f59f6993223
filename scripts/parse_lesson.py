#!/usr/bin/env python3
"""
Parse a lesson page from a local block dump and show what the parser made of it.

Usage:
    python scripts/parse_lesson.py <page_id> [--data-dir DIR] [--json] [--audit] [--no-reorder]
                                   [--order FILE]

Block dumps are read from <data-dir>/<page_id>.json (default: LESSON_DATA_DIR).
An order file is a JSON list of section ids, as saved by the lesson editor.
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from notion_blocks.block_source import JsonFileBlockSource
from notion_blocks.config import LESSON_DATA_DIR, VALIDATE_OUTPUT, setup_logging
from lesson_parser.audit import ContentAudit, audit_content
from lesson_parser.parser import parse_blocks, scan_blocks
from lesson_parser.section_models import ContentSection, sections_to_dicts
from lesson_parser.section_order import apply_custom_section_order
from lesson_parser.validator import SectionValidator

logger = logging.getLogger(__name__)

SUMMARY_WIDTH = 70


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Parse a lesson block dump into content sections")
    parser.add_argument("page_id", help="Notion page id of the lesson")
    parser.add_argument("--data-dir", default=LESSON_DATA_DIR, help="Directory holding <page_id>.json dumps")
    parser.add_argument("--json", action="store_true", help="Print sections as JSON instead of a summary")
    parser.add_argument("--audit", action="store_true", help="Compare page content with parsed sections")
    parser.add_argument("--no-reorder", action="store_true", help="Keep sections in page order")
    parser.add_argument("--order", metavar="FILE", help="JSON list of section ids to apply on top of the parsed order")
    return parser


def load_section_order(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        ordered_ids = json.load(f)
    if not isinstance(ordered_ids, list) or not all(isinstance(i, str) for i in ordered_ids):
        raise ValueError(f"Order file {path} must hold a JSON list of section ids")
    return ordered_ids


def describe(section: ContentSection) -> str:
    """One-line description of a section for the summary view."""
    if section.type == "heading":
        detail = f"h{section.level} {section.text}"
    elif section.type == "teaching-step":
        detail = f"step {section.step_number}: {section.title or section.instruction}"
        if section.duration:
            detail += f" ({section.duration})"
    elif section.type == "safety":
        detail = f"{section.level}: {section.title or section.content}"
    elif section.type in ("checklist", "outcomes", "checkpoint"):
        detail = f"{section.title} [{len(section.items)} items]"
    elif section.type == "timeline":
        detail = f"{len(section.rows)} rows"
    elif section.type == "vocabulary":
        detail = f"{len(section.terms)} terms"
    elif section.type == "resource":
        detail = f"{section.resource_type} {section.title or section.url}"
    else:
        detail = section.content.replace("\n", " ")

    if len(detail) > SUMMARY_WIDTH:
        detail = detail[:SUMMARY_WIDTH - 3] + "..."
    return f"{section.type:<14} {detail}"


def print_summary(sections: List[ContentSection]):
    print(f"{len(sections)} sections")
    for index, section in enumerate(sections, 1):
        print(f"  {index:>3}. {describe(section)}")


def print_audit(audit: ContentAudit):
    print(f"\nAudit: {audit.total_blocks} blocks (including children) -> {audit.total_sections} sections")
    for block_type, count in sorted(audit.block_counts.items(), key=lambda kv: -kv[1]):
        print(f"  {block_type}: {count}")
    if audit.callout_colors:
        print(f"  callout colors: {', '.join(sorted(set(audit.callout_colors)))}")
    for message in audit.successes:
        print(f"  OK   {message}")
    for message in audit.gaps:
        print(f"  GAP  {message}")


def main(argv: Optional[List[str]] = None):
    setup_logging()
    args = build_arg_parser().parse_args(argv)

    try:
        source = JsonFileBlockSource(args.data_dir)
        blocks = source.get_blocks(args.page_id)

        sections = scan_blocks(blocks) if args.no_reorder else parse_blocks(blocks)
        logger.info(f"Parsed page {args.page_id} into {len(sections)} sections")

        if args.order:
            sections = apply_custom_section_order(sections, load_section_order(args.order))

        if VALIDATE_OUTPUT:
            SectionValidator().validate(sections)

        if args.json:
            print(json.dumps(sections_to_dicts(sections), indent=2, ensure_ascii=False))
        else:
            print_summary(sections)

        if args.audit:
            print_audit(audit_content(blocks, sections))

    except Exception as e:
        logger.critical(f"Fatal error while parsing page {args.page_id}: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
