"""Replace pages whose title or summary is not written in the expected language."""

import logging
from typing import List, Optional, Tuple

from lecture_briefs.config import BriefSettings
from lecture_briefs.logging_config import log_event
from lecture_briefs.models import BriefResult, PageSummary
from lecture_briefs.services.fallback_service import placeholder_for
from lecture_briefs.services.language_service import is_conforming


def page_conforms(page: PageSummary, expected_language: str, settings: BriefSettings) -> bool:
    return all(
        is_conforming(
            text,
            expected_language,
            min_confidence=settings.language_min_confidence,
            mixing_tolerance=settings.language_mixing_tolerance,
        )
        for text in (page.title, page.summary)
    )


def enforce_language(
    result: BriefResult,
    expected_language: str,
    settings: Optional[BriefSettings] = None,
) -> Tuple[BriefResult, List[int]]:
    """Swap every non-conforming page for its placeholder.

    Both fields of a failing page are replaced, even when only one of them
    was off. Returns the new result and the replaced page numbers.
    """
    settings = settings or BriefSettings()
    replaced = []
    pages = []
    for page in result.page_summaries:
        if page.fallback or page_conforms(page, expected_language, settings):
            pages.append(page)
            continue
        replaced.append(page.page_number)
        pages.append(placeholder_for(page.page_number, expected_language, settings, source_index=page.source_index))

    if replaced:
        log_event(
            logging.WARNING,
            'brief_language_replaced',
            expected_language=expected_language,
            pages=replaced,
        )
    return BriefResult(page_summaries=pages, error=result.error), replaced
