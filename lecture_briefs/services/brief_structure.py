"""Client-facing brief layout: parallel ``summaries`` and ``page_titles`` lists."""

from datetime import datetime, timezone

from lecture_briefs.logging_config import logger


REQUIRED_FIELDS = ('totalPages', 'summaries', 'metadata')


def standardize_brief_structure(result, extraction_method='ai', now=None):
    generated_at = (now or datetime.now(timezone.utc)).isoformat()
    pages = list(result.page_summaries)
    if all(page.fallback for page in pages) and pages:
        extraction_method = 'fallback'
    metadata = {
        'page_titles': [page.title for page in pages],
        'page_numbers': [page.page_number for page in pages],
        'source_pages': [page.source_index for page in pages],
        'generatedAt': generated_at,
        'extractionMethod': extraction_method,
    }
    if result.error:
        metadata['processingError'] = result.error
    return {
        'totalPages': len(pages),
        'summaries': [page.summary for page in pages],
        'metadata': metadata,
    }


def validate_brief_structure(payload):
    if not isinstance(payload, dict):
        return False
    missing = [name for name in REQUIRED_FIELDS if name not in payload]
    if missing:
        logger.warning(f"Brief structure missing fields: {missing}")
        return False
    metadata = payload.get('metadata')
    summaries = payload.get('summaries')
    if not isinstance(metadata, dict) or not isinstance(metadata.get('page_titles'), list):
        logger.warning("Brief structure has no page_titles list")
        return False
    if not isinstance(summaries, list):
        return False
    if len(summaries) != len(metadata['page_titles']):
        logger.warning(f"Brief structure mismatch: {len(summaries)} summaries vs {len(metadata['page_titles'])} titles")
        return False
    if payload.get('totalPages') != len(summaries):
        logger.warning(f"Brief structure mismatch: totalPages={payload.get('totalPages')} vs {len(summaries)} summaries")
        return False
    return True
