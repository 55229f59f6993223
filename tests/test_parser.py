import unittest

from notion_blocks.blocks import blocks_from_dicts
from lesson_parser.parser import SectionIdAllocator, parse_blocks, parse_raw_blocks, scan_blocks
from lesson_parser.section_models import sections_to_dicts
from helpers import (
    block,
    bullet,
    callout,
    code,
    divider,
    embed,
    file,
    heading,
    image,
    numbered,
    paragraph,
    pdf,
    quote,
    rich_text,
    table,
    todo,
    toggle,
    video,
)


def scan(raw_blocks):
    return scan_blocks(blocks_from_dicts(raw_blocks))


def types(sections):
    return [s.type for s in sections]


class TestParseBasics(unittest.TestCase):

    def test_empty_input(self):
        self.assertEqual(parse_raw_blocks([]), [])
        self.assertEqual(parse_blocks([]), [])

    def test_paragraphs_merge_into_one_prose_section(self):
        sections = parse_raw_blocks([paragraph("First paragraph"), paragraph("Second paragraph")])
        self.assertEqual(types(sections), ["prose"])
        self.assertEqual(sections[0].content, "First paragraph\n\nSecond paragraph")

    def test_empty_paragraphs_are_dropped(self):
        self.assertEqual(parse_raw_blocks([paragraph(""), paragraph("   ")]), [])

    def test_divider_splits_prose(self):
        sections = scan([paragraph("A"), divider(), paragraph("B")])
        self.assertEqual([s.content for s in sections], ["A", "B"])

    def test_prose_line_formats(self):
        sections = scan([
            quote("Measure twice"),
            bullet("Pencil"),
            todo("Sharpen chisels", checked=True),
            todo("Sweep floor"),
            code("x = 1", language="python"),
        ])
        self.assertEqual(len(sections), 1)
        self.assertEqual(
            sections[0].content,
            "> Measure twice\n\n• Pencil\n\n☑ Sharpen chisels\n\n☐ Sweep floor\n\n```python\nx = 1\n```",
        )

    def test_fallback_text(self):
        sections = scan([
            block("bookmark", {"url": "https://example.com", "caption": rich_text("Further reading")}),
            block("synced_block", {"synced_from": None}),
        ])
        self.assertEqual(types(sections), ["prose"])
        self.assertEqual(sections[0].content, "Further reading")

    def test_deterministic(self):
        raw = [
            heading(2, "Materials Needed"),
            bullet("Saw"),
            paragraph("Intro"),
            numbered("Step 1: Mark"),
            callout("Careful", color="red_background"),
            paragraph("Outro"),
        ]
        first = sections_to_dicts(parse_raw_blocks(raw))
        second = sections_to_dicts(parse_raw_blocks(raw))
        self.assertEqual(first, second)


class TestSectionIds(unittest.TestCase):

    def test_block_ids_are_reused(self):
        sections = scan([heading(1, "Welcome", block_id="h-1")])
        self.assertEqual(sections[0].id, "h-1")

    def test_ids_are_unique(self):
        sections = parse_raw_blocks([
            paragraph("a"),
            heading(2, "Intro", block_id="dup"),
            heading(2, "More", block_id="dup"),
            paragraph("b"),
            heading(2, "Clash", block_id="section-1"),
            toggle("Hidden", block_id="dup", children=[paragraph("c"), heading(3, "Inner", block_id="dup")]),
            paragraph("d"),
        ])
        ids = [s.id for s in sections]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertIn("dup", ids)

    def test_allocator(self):
        ids = SectionIdAllocator()
        self.assertEqual(ids.allocate("abc"), "abc")
        self.assertEqual(ids.allocate("abc"), "section-1")
        self.assertEqual(ids.allocate(), "section-2")
        self.assertEqual(ids.allocate(""), "section-3")


class TestCallouts(unittest.TestCase):

    def test_color_maps_to_level(self):
        sections = scan([
            callout("Keep hands clear", color="red_background"),
            callout("Hot glue", color="yellow_background"),
            callout("Sharp edges", color="orange"),
            callout("Danger: loose clothing", color="blue_background"),
        ])
        self.assertEqual(types(sections), ["safety"] * 4)
        self.assertEqual([s.level for s in sections], ["critical", "warning", "warning", "caution"])

    def test_title_and_items(self):
        sections = scan([
            callout("Safety: Check the tools", color="yellow_background",
                    children=[bullet("Blades are sharp"), todo("Guards fitted"), paragraph("ignored")]),
        ])
        safety = sections[0]
        self.assertEqual(safety.title, "Safety")
        self.assertEqual(safety.content, "Check the tools")
        self.assertEqual(safety.items, ["Blades are sharp", "Guards fitted"])

    def test_plain_callout_is_prose(self):
        sections = scan([paragraph("Before"), callout("Nice tip", color="blue_background")])
        self.assertEqual(types(sections), ["prose"])
        self.assertEqual(sections[0].content, "Before\n\nNice tip")

    def test_empty_plain_callout_is_dropped(self):
        self.assertEqual(scan([callout("")]), [])

    def test_empty_safety_colored_callout_is_kept(self):
        sections = scan([callout(""), callout("", color="red_background")])
        self.assertEqual(types(sections), ["safety"])
        self.assertEqual(sections[0].level, "critical")
        self.assertEqual(sections[0].content, "")
        self.assertIsNone(sections[0].title)
        self.assertIsNone(sections[0].items)


class TestHeadings(unittest.TestCase):

    def test_checklist_heading_with_quantities(self):
        sections = parse_raw_blocks([
            heading(2, "Materials Needed"),
            bullet("Bamboo poles x 4"),
            bullet("4x Clamps"),
        ])
        self.assertEqual(types(sections), ["checklist"])
        checklist = sections[0]
        self.assertEqual(checklist.category, "materials")
        self.assertEqual(checklist.title, "Materials Needed")
        self.assertEqual(len(checklist.items), 2)
        self.assertEqual((checklist.items[0].text, checklist.items[0].quantity), ("Bamboo poles", "4"))
        self.assertEqual((checklist.items[1].text, checklist.items[1].quantity), ("Clamps", "4"))

    def test_checklist_fires_on_a_single_item(self):
        sections = scan([heading(3, "Tools"), todo("Hammer")])
        self.assertEqual(types(sections), ["checklist"])
        self.assertEqual(sections[0].category, "tools")

    def test_outcomes_and_checkpoint(self):
        sections = scan([
            heading(2, "Learning Outcomes"),
            bullet("Measure accurately"),
            bullet("Use a tenon saw"),
            heading(2, "What to look for"),
            bullet("Joints are tight"),
            bullet("Frame is square"),
        ])
        self.assertEqual(types(sections), ["outcomes", "checkpoint"])
        self.assertEqual(sections[0].items, ["Measure accurately", "Use a tenon saw"])
        self.assertEqual([i.criterion for i in sections[1].items], ["Joints are tight", "Frame is square"])

    def test_single_item_does_not_make_outcomes(self):
        sections = scan([heading(2, "Learning Outcomes"), bullet("Measure accurately")])
        self.assertEqual(types(sections), ["heading", "prose"])
        self.assertEqual(sections[1].content, "• Measure accurately")

    def test_plain_heading(self):
        sections = scan([paragraph("Intro"), heading(2, "Background"), paragraph("Text")])
        self.assertEqual(types(sections), ["prose", "heading", "prose"])
        self.assertEqual((sections[1].level, sections[1].text), (2, "Background"))

    def test_section_heading_collects_teaching_step(self):
        sections = scan([
            heading(2, "SECTION 1: Introduction", block_id="s1"),
            paragraph("Welcome everyone."),
            bullet("Icebreaker (5 min)"),
            heading(2, "SECTION 2: Build", block_id="s2"),
            heading(1, "Reflection"),
            paragraph("What went well?"),
        ])
        self.assertEqual(types(sections), ["teaching-step", "teaching-step", "heading", "prose"])

        first, second = sections[0], sections[1]
        self.assertEqual(first.id, "s1")
        self.assertEqual(first.step_number, 1)
        self.assertEqual(first.title, "Introduction")
        self.assertEqual(first.instruction, "Welcome everyone.")
        self.assertEqual(first.activities[0].text, "Icebreaker")
        self.assertEqual(first.activities[0].duration, "5 min")

        self.assertEqual(second.step_number, 2)
        self.assertEqual(second.instruction, "Build")
        self.assertIsNone(second.activities)
        self.assertIsNone(second.paragraphs)

    def test_numbered_heading_is_a_section(self):
        sections = scan([heading(3, "3. Key Concepts"), paragraph("Grain direction matters.")])
        self.assertEqual(types(sections), ["teaching-step"])
        self.assertEqual(sections[0].step_number, 3)


class TestNumberedItems(unittest.TestCase):

    def test_explicit_steps(self):
        sections = parse_raw_blocks([
            numbered("Step 1: Measure the wood"),
            numbered("Step 2: Cut along the line (5 mins)"),
        ])
        self.assertEqual(types(sections), ["teaching-step", "teaching-step"])
        self.assertEqual([s.step_number for s in sections], [1, 2])
        self.assertEqual(sections[0].instruction, "Measure the wood")
        self.assertIsNone(sections[0].duration)
        self.assertEqual(sections[1].duration, "5 mins")

    def test_step_tips_and_warnings(self):
        sections = scan([
            numbered("Step 3: Drill the holes", children=[bullet("Use a pilot hole"), bullet("Wear safety glasses")]),
        ])
        self.assertEqual(sections[0].tips, ["Use a pilot hole"])
        self.assertEqual(sections[0].warnings, ["Wear safety glasses"])

    def test_step_counter_resets_on_major_heading(self):
        sections = scan([
            numbered("Step 1: Mark out"),
            heading(2, "Afternoon"),
            numbered("Section 9: Assemble"),
        ])
        self.assertEqual(types(sections), ["teaching-step", "heading", "teaching-step"])
        self.assertEqual(sections[2].step_number, 1)
        self.assertEqual(sections[2].instruction, "Assemble")

    def test_plain_numbered_list_is_prose(self):
        sections = parse_raw_blocks([
            numbered("Gather the tools"),
            numbered("Clear the bench", children=[bullet("Sweep"), paragraph("Wipe down")]),
        ])
        self.assertEqual(types(sections), ["prose"])
        self.assertEqual(sections[0].content, "1. Gather the tools\n2. Clear the bench\n   • Sweep\n   Wipe down")

    def test_plain_list_stops_at_explicit_step(self):
        sections = scan([numbered("Warm up"), numbered("Step 1: Saw")])
        self.assertEqual(types(sections), ["prose", "teaching-step"])
        self.assertEqual(sections[0].content, "1. Warm up")


class TestTablesAndMedia(unittest.TestCase):

    def test_timeline_table(self):
        sections = parse_raw_blocks([
            table([
                ["Time", "Activity", "Duration", "Notes"],
                ["09:00", "Introduction", "15 mins", "Welcome participants"],
            ]),
        ])
        self.assertEqual(types(sections), ["timeline"])
        row = sections[0].rows[0]
        self.assertEqual(
            (row.time, row.activity, row.duration, row.notes),
            ("09:00", "Introduction", "15 mins", "Welcome participants"),
        )

    def test_table_flushes_prose_and_unknown_table_is_dropped(self):
        sections = scan([paragraph("Before"), table([["Name", "Age"], ["Sam", "9"]]), paragraph("After")])
        self.assertEqual([s.content for s in sections], ["Before", "After"])

    def test_media_resources(self):
        sections = scan([
            paragraph("See below"),
            image("https://example.com/frame.png", caption="Frame"),
            video("https://example.com/clip.mp4"),
            pdf("https://example.com/guide.pdf", name="Guide"),
            file("https://example.com/cut-list.xlsx", name="Cut list"),
            embed("https://vimeo.com/123"),
            embed("https://example.com/handout.pdf"),
            embed("https://example.com/board"),
        ])
        self.assertEqual(types(sections), ["prose"] + ["resource"] * 7)
        resources = sections[1:]
        self.assertEqual(
            [r.resource_type for r in resources],
            ["image", "video", "pdf", "file", "video", "pdf", "file"],
        )
        self.assertEqual(resources[0].caption, "Frame")
        self.assertIsNone(resources[1].caption)
        self.assertEqual(resources[2].title, "Guide")
        self.assertEqual(resources[3].title, "Cut list")
        self.assertIsNone(resources[4].title)


class TestToggles(unittest.TestCase):

    def test_toggle_children_are_parsed_in_place(self):
        sections = scan([
            paragraph("Before"),
            toggle("Extra ideas", children=[paragraph("Try a dovetail"), numbered("Step 1: Mark out")]),
            paragraph("After"),
        ])
        self.assertEqual(types(sections), ["prose", "heading", "prose", "teaching-step", "prose"])
        self.assertEqual((sections[1].level, sections[1].text), (3, "Extra ideas"))
        self.assertEqual(sections[2].content, "Try a dovetail")
        self.assertEqual(sections[3].step_number, 1)
        self.assertEqual(sections[4].content, "After")

    def test_nested_toggles(self):
        sections = scan([toggle("Outer", children=[toggle("Inner", children=[paragraph("Deep")])])])
        self.assertEqual(types(sections), ["heading", "heading", "prose"])
        self.assertEqual(sections[2].content, "Deep")


class TestReorderedOutput(unittest.TestCase):

    def test_outcomes_precede_checkpoint(self):
        sections = parse_raw_blocks([
            heading(2, "Success Criteria"),
            bullet("Joints are tight"),
            bullet("Frame is square"),
            heading(2, "Learning Outcomes"),
            bullet("Measure accurately"),
            bullet("Use a tenon saw"),
        ])
        self.assertEqual(types(sections), ["outcomes", "checkpoint"])

    def test_safety_comes_first(self):
        sections = parse_raw_blocks([
            paragraph("Intro"),
            heading(2, "Materials"),
            bullet("Saw"),
            callout("Warning: Sharp blades", color="red_background"),
        ])
        self.assertEqual(types(sections), ["safety", "checklist", "prose"])
        self.assertEqual(sections[0].level, "critical")
        self.assertEqual(sections[0].title, "Warning")


if __name__ == "__main__":
    unittest.main()
