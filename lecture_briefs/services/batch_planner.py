"""Split a document's pages into batches sized for a single model call."""

from typing import Iterator, List, Sequence

from lecture_briefs.config import BriefSettings
from lecture_briefs.models import Batch, PageText


def extract_pages(raw_pages: Sequence[object]) -> List[PageText]:
    pages = []
    for offset, raw in enumerate(raw_pages or []):
        content = '' if raw is None else str(raw)
        pages.append(PageText(index=offset + 1, content=content))
    return pages


def filter_pages(pages: Sequence[PageText]) -> List[PageText]:
    return [page for page in pages if not page.is_blank]


def fits_single_call(pages: Sequence[PageText], settings: BriefSettings) -> bool:
    if len(pages) > settings.small_document_page_limit:
        return False
    return sum(len(page.content) for page in pages) <= settings.single_call_max_chars


def plan_batches(pages: Sequence[PageText], settings: BriefSettings) -> List[Batch]:
    valid_pages = filter_pages(pages)
    if not valid_pages:
        return []
    if fits_single_call(valid_pages, settings):
        return [Batch(pages=list(valid_pages), start_index=0, batch_number=1)]

    size = max(1, settings.pages_per_batch)
    batches = []
    for start in range(0, len(valid_pages), size):
        batches.append(Batch(
            pages=list(valid_pages[start:start + size]),
            start_index=start,
            batch_number=(start // size) + 1,
        ))
    return batches


def group_batches(batches: Sequence[Batch], max_parallel: int) -> Iterator[List[Batch]]:
    width = max(1, int(max_parallel))
    for start in range(0, len(batches), width):
        yield list(batches[start:start + width])
