"""Script-ratio language detection for Georgian and English text."""

import re

from lecture_briefs.models import ENGLISH, GEORGIAN, LanguageAnalysis


GEORGIAN_LETTER_RE = re.compile('[\u10A0-\u10FF\u1C90-\u1CBF]')
LATIN_LETTER_RE = re.compile('[A-Za-z]')

LANGUAGE_ALIASES = {
    'georgian': GEORGIAN,
    'ka': GEORGIAN,
    'kartuli': GEORGIAN,
    'english': ENGLISH,
    'en': ENGLISH,
}


def detect_language(text):
    raw = text or ''
    georgian = len(GEORGIAN_LETTER_RE.findall(raw))
    latin = len(LATIN_LETTER_RE.findall(raw))
    total = georgian + latin
    details = {'georgian': georgian, 'latin': latin, 'total': total}
    if total == 0:
        return LanguageAnalysis(language=ENGLISH, confidence=0.0, details=details)
    georgian_ratio = georgian / total
    if georgian_ratio > 0.5:
        return LanguageAnalysis(language=GEORGIAN, confidence=georgian_ratio, details=details)
    return LanguageAnalysis(language=ENGLISH, confidence=latin / total, details=details)


def minority_ratio(analysis, expected_language):
    """Share of letters written in the script that does not belong to ``expected_language``."""
    total = analysis.details.get('total', 0)
    if total == 0:
        return 0.0
    if expected_language == GEORGIAN:
        foreign = analysis.details.get('latin', 0)
    else:
        foreign = analysis.details.get('georgian', 0)
    return foreign / total


def is_conforming(text, expected_language, min_confidence=0.8, mixing_tolerance=0.1):
    analysis = detect_language(text)
    if analysis.language != expected_language:
        return False
    if analysis.confidence < min_confidence:
        return False
    return minority_ratio(analysis, expected_language) <= mixing_tolerance


def normalize_language(raw_value):
    key = str(raw_value or '').strip().lower()
    return LANGUAGE_ALIASES.get(key)


def resolve_target_language(pages, requested=None):
    """Pick the output language: an explicit supported choice wins, else the first non-blank page decides."""
    explicit = normalize_language(requested)
    if explicit:
        return explicit
    for page in pages:
        if not page.is_blank:
            return detect_language(page.content).language
    return ENGLISH
