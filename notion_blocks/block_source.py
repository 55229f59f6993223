"""
Interface to the fetch layer.

Fetching, caching and rate limiting of Notion pages happen upstream; by the
time blocks reach the parser the tree is fully hydrated. These sources only
hand over what the fetch layer already assembled.
"""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Dict, Any, Optional

from notion_blocks.blocks import Block, blocks_from_dicts
from notion_blocks.config import LESSON_DATA_DIR

logger = logging.getLogger(__name__)


class BlockSource(ABC):
    @abstractmethod
    def get_blocks(self, page_id: str) -> List[Block]:
        """Return the root blocks of a page with their children attached."""
        pass


class InMemoryBlockSource(BlockSource):
    """For callers that already hold the raw block tree in process."""
    def __init__(self, pages: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.store = dict(pages or {})  # page_id -> raw blocks

    def add_page(self, page_id: str, raw_blocks: List[Dict[str, Any]]):
        self.store[page_id] = raw_blocks

    def get_blocks(self, page_id: str) -> List[Block]:
        if page_id not in self.store:
            raise KeyError(f"Page {page_id} not loaded")
        return blocks_from_dicts(self.store[page_id])


class JsonFileBlockSource(BlockSource):
    """
    Reads block dumps written by the fetch layer: ``<base_path>/<page_id>.json``
    holding either a bare list of blocks or a Notion list envelope
    (``{"object": "list", "results": [...]}``).
    """
    def __init__(self, base_path: str = LESSON_DATA_DIR):
        self.base = Path(base_path)

    def _page_path(self, page_id: str) -> Path:
        return self.base / f"{page_id}.json"

    def list_pages(self) -> List[str]:
        if not self.base.exists():
            return []
        return sorted(p.stem for p in self.base.glob("*.json"))

    def get_blocks(self, page_id: str) -> List[Block]:
        path = self._page_path(page_id)
        if not path.exists():
            raise FileNotFoundError(f"No block dump for page {page_id} at {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse block dump {path}: {e}")
            raise ValueError(f"Block dump for page {page_id} is not valid JSON") from e

        if isinstance(data, dict):
            data = data.get("results")
        if not isinstance(data, list):
            raise ValueError(f"Block dump for page {page_id} has no block list")

        blocks = blocks_from_dicts(data)
        logger.info(f"Loaded {len(blocks)} root blocks for page {page_id}")
        return blocks
