"""Turn a raw model reply into a ``BriefResult`` for one batch.

Parsing goes through the JSON repair chain. The parsed object must hold a
non-empty ``pageSummaries`` list whose entries carry non-empty ``title`` and
``summary`` strings. Page numbers supplied by the model are ignored: every
entry is numbered by its position inside the batch. Summaries that are too
short or read as bare topic lists are swapped for placeholders.
"""

import html
import logging
import re
from typing import Optional

from lecture_briefs.config import BriefSettings
from lecture_briefs.errors import BriefShapeError
from lecture_briefs.logging_config import log_event
from lecture_briefs.models import Batch, BriefResult, PageSummary
from lecture_briefs.services.fallback_service import placeholder_for
from lecture_briefs.services.json_repair import parse_json_with_repairs


MAX_TITLE_LENGTH = 100

HTML_TAG_RE = re.compile(r'</?[A-Za-z][^<>]*>')
CSS_PATTERNS = [
    re.compile(r'\bclass\s*=\s*["\'][^"\']*["\']'),
    re.compile(r'\bclassName\s*=\s*["\'][^"\']*["\']'),
    re.compile(r'\bstyle\s*=\s*["\'][^"\']*["\']'),
    re.compile(r'\btext-(?:gray|blue|red|green|black|white)-\d+'),
    re.compile(r'\bdark:text-[\w-]+'),
    re.compile(r'\bfont-(?:semibold|bold|medium|normal)\b'),
]

_VERBS = r'(?:describes?|covers?|explains?|discusses?|presents?|contains?|includes?|provides?)'
FORBIDDEN_LEADING_PHRASES = [
    re.compile(r'^This (?:page|chapter|section|document)\s+' + _VERBS + r'\s*', re.IGNORECASE),
    re.compile(r'^The (?:page|content)\s+' + _VERBS + r'\s*', re.IGNORECASE),
    re.compile(r'^Students are tasked with\s*', re.IGNORECASE),
    re.compile(r'^The core aim is\s*', re.IGNORECASE),
    re.compile(r'^Here we\s+(?:discuss|explore|examine|look at)\s*', re.IGNORECASE),
    re.compile(r'^(?:In|On) this page,?\s*', re.IGNORECASE),
]
PAGE_PREFIX_RE = re.compile(r'^Page\s+\d+\s*:\s*', re.IGNORECASE)


def contains_html_or_css(text):
    if not text:
        return False
    if HTML_TAG_RE.search(text):
        return True
    return any(pattern.search(text) for pattern in CSS_PATTERNS)


def strip_html(text):
    cleaned = str(text or '')
    for pattern in CSS_PATTERNS:
        cleaned = pattern.sub('', cleaned)
    cleaned = HTML_TAG_RE.sub('', cleaned)
    cleaned = html.unescape(cleaned)
    cleaned = re.sub(r'[ \t]{2,}', ' ', cleaned)
    cleaned = re.sub(r'\n{3,}', '\n\n', cleaned)
    return cleaned.strip()


def clean_title(title):
    cleaned = str(title or '')
    if contains_html_or_css(cleaned):
        cleaned = strip_html(cleaned)
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()
    cleaned = re.sub(r'[.,;:!]+$', '', cleaned).strip()
    if len(cleaned) > MAX_TITLE_LENGTH:
        cleaned = cleaned[:MAX_TITLE_LENGTH - 3].rstrip() + '...'
    return cleaned


def clean_summary(summary):
    cleaned = str(summary or '')
    if contains_html_or_css(cleaned):
        cleaned = strip_html(cleaned)
    cleaned = cleaned.strip()
    for phrase in FORBIDDEN_LEADING_PHRASES:
        if phrase.search(cleaned):
            cleaned = phrase.sub('', cleaned, count=1)
            if cleaned[:1].isascii():
                cleaned = cleaned[:1].upper() + cleaned[1:]
            break
    cleaned = PAGE_PREFIX_RE.sub('', cleaned, count=1)
    return cleaned.strip()


WORD_RE = re.compile(r"[^\W_]+(?:['-][^\W_]+)*")
SENTENCE_END_RE = re.compile(r'[.!?]+')
TOPIC_LIST_MARKERS = ('themes are explored', 'topics covered', 'concepts include')
MIN_SENTENCES = 3


def count_words(text):
    return len(WORD_RE.findall(text or ''))


def count_sentences(text):
    return sum(1 for part in SENTENCE_END_RE.split(text or '') if WORD_RE.search(part))


def is_topic_list(summary):
    """Bare lists of topics instead of explanations."""
    lowered = (summary or '').lower()
    if any(marker in lowered for marker in TOPIC_LIST_MARKERS):
        return True
    return count_sentences(summary) < MIN_SENTENCES


def assess_summary(summary, settings):
    """Return the reason a summary is too thin to keep, or None."""
    if count_words(summary) < settings.min_words_per_page:
        return 'too_short'
    if is_topic_list(summary):
        return 'topic_list'
    return None


def _log_summary_length(batch, page_number, words, settings):
    if words > settings.max_words_per_page:
        log_event(
            logging.INFO,
            'brief_summary_over_limit',
            batch=batch.batch_number,
            page=page_number,
            words=words,
            max_words=settings.max_words_per_page,
        )
    elif words < settings.target_words_per_page * 0.8:
        log_event(
            logging.DEBUG,
            'brief_summary_below_target',
            batch=batch.batch_number,
            page=page_number,
            words=words,
            target_words=settings.target_words_per_page,
        )


def _required_text(entry, key, position):
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise BriefShapeError(f'Entry {position + 1} has no usable "{key}".')
    return value


def parse_and_validate(
    raw_text: str,
    batch: Batch,
    expected_language: str,
    settings: Optional[BriefSettings] = None,
) -> BriefResult:
    settings = settings or BriefSettings()
    payload, strategy = parse_json_with_repairs(raw_text)
    if strategy != 'keep_as_is':
        log_event(logging.DEBUG, 'brief_json_repaired', batch=batch.batch_number, strategy=strategy)

    if not isinstance(payload, dict):
        raise BriefShapeError('Model response is not a JSON object.')
    entries = payload.get('pageSummaries')
    if not isinstance(entries, list) or not entries:
        raise BriefShapeError('"pageSummaries" must be a non-empty list.')

    cleaned_entries = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise BriefShapeError(f'Entry {position + 1} is not an object.')
        title = clean_title(_required_text(entry, 'title', position))
        summary = clean_summary(_required_text(entry, 'summary', position))
        if not title or not summary:
            raise BriefShapeError(f'Entry {position + 1} is empty after cleaning.')
        cleaned_entries.append((title, summary))

    expected = len(batch.pages)
    if len(cleaned_entries) != expected:
        log_event(
            logging.WARNING,
            'brief_page_count_corrected',
            batch=batch.batch_number,
            expected=expected,
            received=len(cleaned_entries),
        )

    page_summaries = []
    for offset, (page_number, page) in enumerate(zip(batch.page_numbers, batch.pages)):
        if offset < len(cleaned_entries):
            title, summary = cleaned_entries[offset]
            words = count_words(summary)
            reason = assess_summary(summary, settings)
            if reason:
                log_event(
                    logging.WARNING,
                    'brief_summary_too_short',
                    batch=batch.batch_number,
                    page=page_number,
                    words=words,
                    min_words=settings.min_words_per_page,
                    reason=reason,
                )
                page_summaries.append(placeholder_for(page_number, expected_language, settings, source_index=page.index))
                continue
            _log_summary_length(batch, page_number, words, settings)
            page_summaries.append(PageSummary(
                page_number=page_number,
                title=title,
                summary=summary,
                source_index=page.index,
            ))
        else:
            page_summaries.append(placeholder_for(page_number, expected_language, settings, source_index=page.index))
    return BriefResult(page_summaries=page_summaries)
