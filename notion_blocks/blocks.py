"""
Typed view over the raw Notion block tree handed over by the fetch layer.

The fetch layer delivers blocks as plain JSON objects (``{"id", "type",
"<type>": {...payload}, "children": [...]}``). ``Block.from_dict`` wraps them
without ever failing: missing ids, payloads or children degrade to empty
values so the parser can stay total.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from enum import Enum


class BlockType(Enum):
    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    TOGGLE = "toggle"
    CALLOUT = "callout"
    QUOTE = "quote"
    DIVIDER = "divider"
    TABLE = "table"
    TABLE_ROW = "table_row"
    CODE = "code"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"
    PDF = "pdf"
    EMBED = "embed"
    BOOKMARK = "bookmark"
    CHILD_PAGE = "child_page"
    LINK_TO_PAGE = "link_to_page"
    COLUMN_LIST = "column_list"
    COLUMN = "column"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_tag(cls, tag: Any) -> "BlockType":
        try:
            return cls(tag)
        except ValueError:
            return cls.UNSUPPORTED


HEADING_LEVELS = {
    BlockType.HEADING_1: 1,
    BlockType.HEADING_2: 2,
    BlockType.HEADING_3: 3,
}


@dataclass
class Annotations:
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    code: bool = False
    color: str = "default"

    @classmethod
    def from_dict(cls, raw: Any) -> "Annotations":
        if not isinstance(raw, dict):
            return cls()
        return cls(
            bold=bool(raw.get("bold", False)),
            italic=bool(raw.get("italic", False)),
            strikethrough=bool(raw.get("strikethrough", False)),
            underline=bool(raw.get("underline", False)),
            code=bool(raw.get("code", False)),
            color=str(raw.get("color") or "default"),
        )


@dataclass
class RichText:
    plain_text: str
    href: Optional[str] = None
    annotations: Annotations = field(default_factory=Annotations)

    @classmethod
    def from_dict(cls, raw: Any) -> "RichText":
        if not isinstance(raw, dict):
            return cls(plain_text="")
        plain_text = raw.get("plain_text")
        if plain_text is None:
            # Request payloads carry text.content instead of plain_text
            text_obj = raw.get("text")
            plain_text = text_obj.get("content", "") if isinstance(text_obj, dict) else ""
        return cls(
            plain_text=str(plain_text or ""),
            href=raw.get("href"),
            annotations=Annotations.from_dict(raw.get("annotations")),
        )


def to_rich_text(value: Any) -> List[RichText]:
    """Convert a raw rich text array; anything that is not a list is empty."""
    if not isinstance(value, list):
        return []
    return [RichText.from_dict(item) for item in value]


def extract_text(rich_text: Optional[List[RichText]]) -> str:
    """Join the plain text of a rich text array."""
    if not rich_text:
        return ""
    return "".join(rt.plain_text for rt in rich_text)


@dataclass
class Block:
    id: str
    type: BlockType
    payload: Dict[str, Any] = field(default_factory=dict)
    children: List["Block"] = field(default_factory=list)
    raw_type: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> "Block":
        if not isinstance(raw, dict):
            return cls(id="", type=BlockType.UNSUPPORTED)

        raw_type = raw.get("type")
        if not isinstance(raw_type, str):
            raw_type = ""

        payload = raw.get(raw_type) if raw_type else None
        if not isinstance(payload, dict):
            payload = {}

        raw_children = raw.get("children")
        children = [cls.from_dict(child) for child in raw_children] if isinstance(raw_children, list) else []

        block_id = raw.get("id")
        return cls(
            id=str(block_id) if block_id is not None else "",
            type=BlockType.from_tag(raw_type),
            payload=payload,
            children=children,
            raw_type=raw_type,
        )

    # -- payload accessors -------------------------------------------------

    @property
    def rich_text(self) -> List[RichText]:
        return to_rich_text(self.payload.get("rich_text"))

    @property
    def text(self) -> str:
        return extract_text(self.rich_text)

    @property
    def caption_text(self) -> str:
        return extract_text(to_rich_text(self.payload.get("caption")))

    @property
    def color(self) -> str:
        color = self.payload.get("color")
        return color if isinstance(color, str) else ""

    @property
    def url(self) -> str:
        """
        Resolve the URL of a media/file/embed block.
        Hosted files live under payload["file"]["url"], external ones under
        payload["external"]["url"]; embeds and bookmarks carry a bare url.
        """
        source_type = self.payload.get("type")
        keys = ["external", "file"]
        if source_type == "file":
            keys.reverse()
        for key in keys:
            source = self.payload.get(key)
            if isinstance(source, dict) and isinstance(source.get("url"), str):
                return source["url"]
        bare = self.payload.get("url")
        return bare if isinstance(bare, str) else ""

    @property
    def name(self) -> Optional[str]:
        name = self.payload.get("name")
        return name if isinstance(name, str) and name else None

    @property
    def checked(self) -> bool:
        return bool(self.payload.get("checked", False))

    @property
    def language(self) -> str:
        language = self.payload.get("language")
        return language if isinstance(language, str) else ""

    @property
    def cells(self) -> List[str]:
        """Plain text of each cell of a table_row block."""
        raw_cells = self.payload.get("cells")
        if not isinstance(raw_cells, list):
            return []
        return [extract_text(to_rich_text(cell)) for cell in raw_cells]

    @property
    def heading_level(self) -> Optional[int]:
        return HEADING_LEVELS.get(self.type)

    @property
    def is_heading(self) -> bool:
        return self.type in HEADING_LEVELS


def blocks_from_dicts(raw_blocks: Any) -> List[Block]:
    if not isinstance(raw_blocks, list):
        return []
    return [Block.from_dict(raw) for raw in raw_blocks]
