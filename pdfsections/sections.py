# pdfsections/sections.py

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from PyPDF2 import PdfReader

logger = logging.getLogger(__name__)

SUPPORTED_EXTS = (".pdf",)


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Section:
    section_number: str
    path: Optional[Path] = None
    page_count: int = 0
    enabled: bool = True
    id: str = field(default_factory=_new_id)

    @property
    def display_name(self) -> str:
        return Path(self.path).name if self.path else "(no file)"

    def read_bytes(self) -> bytes:
        with open(self.path, "rb") as f:
            return f.read()


def count_pages(path) -> int:
    """Return the page count of a PDF, or 0 if it cannot be read."""
    try:
        with open(path, "rb") as f:
            return len(PdfReader(f).pages)
    except Exception as e:
        logger.error("Could not read page count of %s: %s", path, e)
        return 0


def read_page_counts(sections: Iterable[Section]) -> Dict[str, int]:
    """Count pages for each section, keyed by id. Touches no shared state."""
    return {section.id: count_pages(section.path) for section in sections}


class SectionList:
    """
    Ordered, user-arranged list of sections.

    Indices are validated: out-of-range positions raise IndexError and
    unknown section ids raise KeyError. ``revision`` changes on every
    mutation so a snapshot can be checked against the live list.
    """

    def __init__(self, sections: Iterable[Section] = ()):
        self._sections: List[Section] = list(sections)
        self.revision = 0

    def __iter__(self) -> Iterator[Section]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __getitem__(self, index: int) -> Section:
        return self._sections[index]

    def _changed(self) -> None:
        self.revision += 1

    def _check_index(self, index: int, upper: Optional[int] = None) -> None:
        upper = len(self._sections) - 1 if upper is None else upper
        if not 0 <= index <= upper:
            raise IndexError(f"Section index {index} out of range")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def index_of(self, section_id: str) -> int:
        for i, section in enumerate(self._sections):
            if section.id == section_id:
                return i
        raise KeyError(section_id)

    def get(self, section_id: str) -> Section:
        return self._sections[self.index_of(section_id)]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_files(self, paths: Iterable) -> List[Section]:
        """
        Append one section per PDF path. Non-PDF paths are skipped.
        New sections are numbered from the list length before the add.
        """
        start = len(self._sections)
        added = []
        for index, file in enumerate(paths):
            if not str(file).lower().endswith(SUPPORTED_EXTS):
                logger.info("Skipping unsupported file: %s", file)
                continue
            added.append(Section(section_number=str(start + index), path=Path(file)))

        if added:
            self._sections.extend(added)
            self._changed()
        return added

    def append(self, section: Section) -> None:
        self._sections.append(section)
        self._changed()

    def insert(self, index: int, section: Section) -> None:
        self._check_index(index, upper=len(self._sections))
        self._sections.insert(index, section)
        self._changed()

    def remove(self, section_id: str) -> Section:
        return self.remove_at(self.index_of(section_id))

    def remove_at(self, index: int) -> Section:
        self._check_index(index)
        section = self._sections.pop(index)
        self._changed()
        return section

    def move(self, from_index: int, to_index: int) -> None:
        """Drag-and-drop reorder: take the item out, drop it at *to_index*."""
        self._check_index(from_index)
        self._check_index(to_index)
        if from_index == to_index:
            return
        section = self._sections.pop(from_index)
        self._sections.insert(to_index, section)
        self._changed()

    def move_up(self, index: int) -> None:
        self._check_index(index)
        if index > 0:
            self.move(index, index - 1)

    def move_down(self, index: int) -> None:
        self._check_index(index)
        if index < len(self._sections) - 1:
            self.move(index, index + 1)

    def update(self, section_id: str, **changes) -> Section:
        index = self.index_of(section_id)
        self._sections[index] = replace(self._sections[index], **changes)
        self._changed()
        return self._sections[index]

    def clear(self) -> None:
        self._sections.clear()
        self._changed()

    # ------------------------------------------------------------------
    # Assembly support
    # ------------------------------------------------------------------

    def pending_page_counts(self) -> Tuple[Section, ...]:
        """Copies of the sections whose page count is still unknown."""
        return tuple(
            replace(section)
            for section in self._sections
            if section.path and section.page_count == 0
        )

    def apply_page_counts(self, counts: Dict[str, int]) -> None:
        """Store counts by section id; ids no longer in the list are ignored."""
        for section_id, count in counts.items():
            if not count:
                continue
            try:
                self.update(section_id, page_count=count)
            except KeyError:
                logger.debug("Section %s was removed before its count arrived", section_id)

    def resolve_page_counts(self) -> None:
        self.apply_page_counts(read_page_counts(self.pending_page_counts()))

    def snapshot(self) -> Tuple[Section, ...]:
        return tuple(replace(section) for section in self._sections)
