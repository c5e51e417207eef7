"""Deterministic placeholder pages used when model output cannot be kept."""

from typing import List, Optional

from lecture_briefs.config import BriefSettings
from lecture_briefs.models import ENGLISH, GEORGIAN, Batch, PageSummary


PLACEHOLDER_TITLES = {
    ENGLISH: (
        'Key Concepts',
        'Main Ideas',
        'Topic Overview',
        'Core Principles',
        'Important Details',
    ),
    GEORGIAN: (
        'ძირითადი ცნებები',
        'მთავარი იდეები',
        'თემის მიმოხილვა',
        'ძირითადი პრინციპები',
        'მნიშვნელოვანი დეტალები',
    ),
}

PLACEHOLDER_SUMMARY_TEMPLATES = {
    ENGLISH: (
        '## {title}\n\n'
        'An automatic summary could not be prepared for page {page_number}. '
        'Review the original material for this page and write a {min_words}-{target_words} word '
        'explanation that covers the key concepts, one or two concrete examples, '
        'and why the topic matters.'
    ),
    GEORGIAN: (
        '## {title}\n\n'
        'გვერდი {page_number}: ავტომატური შეჯამება ვერ მომზადდა. '
        'გადახედეთ ამ გვერდის ორიგინალ მასალას და დაწერეთ {min_words}-{target_words} სიტყვიანი '
        'ახსნა, რომელიც მოიცავს ძირითად ცნებებს, კონკრეტულ მაგალითებს '
        'და თემის მნიშვნელობას.'
    ),
}


def _language_key(language):
    return GEORGIAN if language == GEORGIAN else ENGLISH


def placeholder_title(page_number: int, language: str) -> str:
    titles = PLACEHOLDER_TITLES[_language_key(language)]
    return titles[(max(1, int(page_number)) - 1) % len(titles)]


def placeholder_summary(page_number: int, language: str, settings: Optional[BriefSettings] = None) -> str:
    settings = settings or BriefSettings()
    return PLACEHOLDER_SUMMARY_TEMPLATES[_language_key(language)].format(
        title=placeholder_title(page_number, language),
        page_number=page_number,
        min_words=settings.min_words_per_page,
        target_words=settings.target_words_per_page,
    )


def placeholder_for(
    page_number: int,
    language: str,
    settings: Optional[BriefSettings] = None,
    source_index: Optional[int] = None,
) -> PageSummary:
    return PageSummary(
        page_number=page_number,
        title=placeholder_title(page_number, language),
        summary=placeholder_summary(page_number, language, settings),
        source_index=source_index,
        fallback=True,
    )


def build_fallback_summaries(batch: Batch, language: str, settings: Optional[BriefSettings] = None) -> List[PageSummary]:
    """One placeholder per page of ``batch``; no model call involved."""
    return [
        placeholder_for(page_number, language, settings, source_index=page.index)
        for page_number, page in zip(batch.page_numbers, batch.pages)
    ]
