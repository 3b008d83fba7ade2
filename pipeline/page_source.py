"""
Work units and page-number resolution.

The converter hands back page images sorted by page number. Each image becomes
one WorkUnit whose index is its position in that list; the PageSelection the
run was configured with maps an index back to the document page it came from.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from infra.errors import ConfigurationError

ALL_PAGES = -1

PagesOption = Union[int, Sequence[int]]


@dataclass(frozen=True)
class WorkUnit:
    index: int
    source_ref: Path


class PageSelection:
    """
    Which pages a run converts, and how work-unit indexes map to page numbers.

    - ALL_PAGES (-1): every page, index i -> page i + 1
    - [p0, p1, ...]: sorted, de-duplicated explicit pages, index i -> pages[i]
    - n: a single page, every index -> n
    """

    def __init__(self, option: PagesOption = ALL_PAGES):
        self.mode, self.pages = _parse_option(option)

    @property
    def is_all(self) -> bool:
        return self.mode == "all"

    def page_numbers(self) -> Optional[List[int]]:
        """Pages to hand to the converter (None = all)."""
        if self.is_all:
            return None
        return list(self.pages)

    def resolve_page_number(self, index: int) -> int:
        if self.mode == "all":
            return index + 1
        if self.mode == "list":
            return self.pages[index]
        return self.pages[0]

    def __repr__(self) -> str:
        if self.is_all:
            return "PageSelection(all)"
        if self.mode == "single":
            return f"PageSelection({self.pages[0]})"
        return f"PageSelection({self.pages})"


def _parse_option(option: PagesOption):
    if isinstance(option, bool):
        raise ConfigurationError(f"Invalid page selection: {option!r}")

    if isinstance(option, int):
        if option == ALL_PAGES:
            return "all", []
        if option < 1:
            raise ConfigurationError(
                f"Page number must be >= 1 (or -1 for all pages), got {option}"
            )
        return "single", [option]

    if isinstance(option, (str, bytes)) or not isinstance(option, Sequence):
        raise ConfigurationError(f"Invalid page selection: {option!r}")

    pages = list(option)
    if not pages:
        raise ConfigurationError("Page list must not be empty")
    for page in pages:
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ConfigurationError(f"Page numbers must be integers >= 1, got {page!r}")

    return "list", sorted(set(pages))


def build_work_units(images: Sequence[Path], selection: PageSelection) -> List[WorkUnit]:
    """
    One WorkUnit per image, in the order given.

    Raises:
        ConfigurationError: If an explicit page list and the image count differ
    """
    if selection.mode == "list" and len(images) != len(selection.pages):
        raise ConfigurationError(
            f"Requested {len(selection.pages)} pages {selection.pages} but conversion "
            f"produced {len(images)} images"
        )

    return [WorkUnit(index=i, source_ref=Path(image)) for i, image in enumerate(images)]
