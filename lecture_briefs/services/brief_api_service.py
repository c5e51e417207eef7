"""Business logic handlers for brief APIs."""

import asyncio

import sentry_sdk
from flask import jsonify

from lecture_briefs.logging_config import logger
from lecture_briefs.models import SUPPORTED_LANGUAGES
from lecture_briefs.repositories import briefs_repo
from lecture_briefs.services.batch_planner import extract_pages
from lecture_briefs.services.brief_service import generate_brief
from lecture_briefs.services.brief_structure import standardize_brief_structure, validate_brief_structure
from lecture_briefs.services.language_service import normalize_language, resolve_target_language
from lecture_briefs.services.prompt_registry import get_prompt_metadata
from lecture_briefs.services.usage_service import UsageLedger


class BriefRequestError(ValueError):
    pass


def parse_brief_request(payload, settings):
    """Validate a create-brief body and return ``(pages, language, lecture_id)``."""
    if not isinstance(payload, dict):
        raise BriefRequestError('Invalid payload')

    pages = payload.get('pages')
    if not isinstance(pages, list):
        raise BriefRequestError('pages must be a list of strings')
    if len(pages) > settings.max_pages_per_request:
        raise BriefRequestError(f'At most {settings.max_pages_per_request} pages are allowed per request')
    if any(not isinstance(page, str) for page in pages):
        raise BriefRequestError('pages must be a list of strings')
    if not any(page.strip() for page in pages):
        raise BriefRequestError('At least one page must contain text')

    language = None
    raw_language = payload.get('language')
    if raw_language not in (None, ''):
        language = normalize_language(raw_language)
        if language not in SUPPORTED_LANGUAGES:
            raise BriefRequestError(f"language must be one of: {', '.join(SUPPORTED_LANGUAGES)}")

    lecture_id = None
    raw_lecture_id = payload.get('lecture_id')
    if raw_lecture_id not in (None, ''):
        lecture_id = briefs_repo.sanitize_lecture_id(raw_lecture_id)
        if not lecture_id:
            raise BriefRequestError('Invalid lecture_id')

    return pages, language, lecture_id


def create_brief(runtime, request):
    settings = runtime.config.brief
    try:
        pages, requested_language, lecture_id = parse_brief_request(request.get_json(silent=True), settings)
    except BriefRequestError as e:
        return jsonify({'error': str(e)}), 400

    if not runtime.gemini_ready:
        return jsonify({'error': 'Brief generation is not configured'}), 503

    language = resolve_target_language(extract_pages(pages), requested_language)
    ledger = UsageLedger()
    try:
        result = asyncio.run(generate_brief(
            pages,
            runtime.build_invoker(),
            settings=settings,
            target_language=language,
            ledger=ledger,
        ))
    except Exception as e:
        logger.error(f"Brief generation failed: {e}")
        sentry_sdk.capture_exception(e)
        return jsonify({'error': 'Could not generate brief'}), 500

    brief = result.to_dict()
    structure = standardize_brief_structure(result)
    if not validate_brief_structure(structure):
        logger.warning("Generated brief structure failed validation")
    body = {
        'brief': brief,
        'structure': structure,
        'language': language,
        'usage': ledger.to_dict(),
    }

    if lecture_id and runtime.firestore_ready:
        try:
            briefs_repo.save_brief(runtime.db, lecture_id, {
                'brief': brief,
                'structure': structure,
                'language': language,
                'usage': body['usage'],
            })
            body['saved'] = True
        except Exception as e:
            logger.warning(f"Could not save brief for lecture {lecture_id}: {e}")
            sentry_sdk.capture_exception(e)
            body['saved'] = False

    return jsonify(body), 200


def get_brief(runtime, lecture_id):
    if not runtime.firestore_ready:
        return jsonify({'error': 'Brief storage is not configured'}), 503
    safe_id = briefs_repo.sanitize_lecture_id(lecture_id)
    if not safe_id:
        return jsonify({'error': 'Invalid lecture_id'}), 400
    try:
        record = briefs_repo.get_brief(runtime.db, safe_id)
    except Exception as e:
        logger.error(f"Error fetching brief for lecture {safe_id}: {e}")
        return jsonify({'error': 'Could not load brief'}), 500
    if record is None:
        return jsonify({'error': 'Brief not found'}), 404
    return jsonify(record), 200


def get_health(runtime):
    return jsonify({
        'status': 'ok',
        'gemini_ready': runtime.gemini_ready,
        'firestore_ready': runtime.firestore_ready,
        'firestore_error': runtime.firebase_init_error,
        'model': runtime.config.brief_model,
        'prompts': get_prompt_metadata(),
    }), 200
