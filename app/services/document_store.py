"""
Knowledge Document Store

Reads team knowledge documents (one markdown file per team plus the root
document) and inserts registered items into their "## 💡 학습" and
"## ⛔ 기준" sections without touching anything else in the file.

Insertion rules:
1. No section header in the document: append header + item at the end.
2. Section body holds a "(아직 등록된 ... 없음)" placeholder: replace that line.
3. Section already has bullets: insert after the last bullet.
4. Section is blank: insert right after the header line.
"""

import asyncio
import logging
import re
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from app.models.team import SectionKind
from app.services.team_directory import TeamDirectory

logger = logging.getLogger(__name__)

SECTION_HEADERS: Dict[SectionKind, str] = {
    SectionKind.LEARNING: "## 💡 학습",
    SectionKind.STANDARD: "## ⛔ 기준",
}

PLACEHOLDER_PATTERNS: Dict[SectionKind, re.Pattern] = {
    SectionKind.LEARNING: re.compile(r"[\(（]아직 등록된 학습이? 없음\.?[\)）]"),
    SectionKind.STANDARD: re.compile(r"[\(（]아직 등록된 기준이? 없음\.?[\)）]"),
}

NEXT_SECTION = re.compile(r"\n## ")
BACKUP_SUFFIX = ".bak"


class DocumentNotFoundError(Exception):
    """Raised when a knowledge document cannot be read."""

    pass


def normalize_item(text: str) -> str:
    """Collapse a (possibly multi-line) submission into a single bullet text."""
    return " ".join(line.strip() for line in text.splitlines() if line.strip())


def _find_header(document: str, header: str) -> Optional[Tuple[int, int]]:
    """Return (start, end_of_line) of the first line starting with header."""
    match = re.search(r"^" + re.escape(header), document, re.MULTILINE)
    if not match:
        return None
    line_end = document.find("\n", match.start())
    return match.start(), len(document) if line_end == -1 else line_end


def _section_end(document: str, header_line_end: int) -> int:
    """Index where the section ends: the newline before the next '## ' header, or EOF."""
    match = NEXT_SECTION.search(document, header_line_end)
    return len(document) if match is None else match.start()


def _line_end(document: str, index: int, limit: int) -> int:
    end = document.find("\n", index, limit)
    return limit if end == -1 else end


def insert_item(document: str, kind: SectionKind, text: str) -> str:
    """
    Return a copy of document with "- text" added to the section for kind.

    Content outside the target section is preserved byte for byte.
    """
    header = SECTION_HEADERS[kind]
    new_item = f"- {normalize_item(text)}"

    located = _find_header(document, header)
    if located is None:
        if not document.strip():
            return f"{header}\n{new_item}\n"
        return document.rstrip() + f"\n\n{header}\n{new_item}\n"

    _, header_end = located
    section_end = _section_end(document, header_end)
    body = document[header_end:section_end]

    placeholder = PLACEHOLDER_PATTERNS[kind].search(body)
    if placeholder:
        start = document.rfind("\n", 0, header_end + placeholder.start()) + 1
        end = _line_end(document, header_end + placeholder.end(), section_end)
        return document[:start] + new_item + document[end:]

    last_bullet = body.rfind("\n- ")
    if last_bullet == -1:
        return document[:header_end] + "\n" + new_item + document[header_end:]

    # Skip over indented continuation lines that belong to the last bullet
    pos = _line_end(document, header_end + last_bullet + 1, section_end)
    while pos < section_end:
        next_end = _line_end(document, pos + 1, section_end)
        line = document[pos + 1:next_end]
        if not line.strip() or not line[0].isspace():
            break
        pos = next_end

    return document[:pos] + "\n" + new_item + document[pos:]


def extract_items(document: str, kind: SectionKind) -> List[str]:
    """Bullet texts of the section for kind, placeholders excluded."""
    header = SECTION_HEADERS[kind]
    located = _find_header(document, header)
    if located is None:
        return []

    _, header_end = located
    body = document[header_end:_section_end(document, header_end)]

    items = []
    for line in body.split("\n"):
        stripped = line.strip()
        if not stripped.startswith("- "):
            continue
        item = stripped[2:].strip()
        if PLACEHOLDER_PATTERNS[kind].search(item):
            continue
        items.append(item)
    return items


class KnowledgeDocumentStore:
    """File-backed access to team knowledge documents."""

    def __init__(
        self,
        root_path: str | Path,
        directory: TeamDirectory,
        root_document: str = "CLAUDE.md",
    ):
        self.root_path = Path(root_path).resolve()
        self.directory = directory
        self.root_document = root_document
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def path_for(self, team_key: Optional[str]) -> Path:
        """Document path of a team, or of the root context when team_key is None."""
        if team_key is None:
            return self.root_path / self.root_document
        return self.root_path / self.directory.get(team_key).document_path

    def _read(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise DocumentNotFoundError(f"Cannot read knowledge document: {path}") from e

    def _backup(self, path: Path, content: str) -> None:
        backup_path = path.with_name(path.name + BACKUP_SUFFIX)
        try:
            backup_path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Backup write failed for {backup_path}: {e}")

    def _append(self, team_key: str, kind: SectionKind, text: str) -> str:
        path = self.path_for(team_key)
        original = self._read(path)
        self._backup(path, original)
        updated = insert_item(original, kind, text)
        path.write_text(updated, encoding="utf-8")
        return updated

    async def read_document(self, team_key: Optional[str]) -> str:
        """Full document text. Raises DocumentNotFoundError."""
        return await asyncio.to_thread(self._read, self.path_for(team_key))

    async def append_item(self, team_key: str, kind: SectionKind, text: str) -> None:
        """
        Add a bullet to a team's section, writing a .bak copy first.

        Raises:
            DocumentNotFoundError: If the team's document cannot be read
        """
        async with self._locks[team_key]:
            await asyncio.to_thread(self._append, team_key, kind, text)
        logger.info(f"Appended {kind.value} item to {team_key}: {normalize_item(text)[:80]}")

    async def list_items(self, team_key: str, kind: SectionKind) -> List[str]:
        document = await self.read_document(team_key)
        return extract_items(document, kind)
