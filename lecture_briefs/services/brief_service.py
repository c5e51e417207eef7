"""Batch orchestration for multi-page brief generation.

Each batch runs its own attempt loop: prompt, model call, JSON repair and
shape validation, then language enforcement. A batch that keeps failing is
filled with placeholder pages instead of raising, so ``generate_brief``
always returns one summary per non-blank input page.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import sentry_sdk

from lecture_briefs.config import BriefSettings
from lecture_briefs.errors import BriefShapeError, LanguageMismatchError
from lecture_briefs.logging_config import log_event
from lecture_briefs.models import Batch, BriefResult, PageSummary
from lecture_briefs.services.batch_planner import extract_pages, group_batches, plan_batches
from lecture_briefs.services.brief_validation import parse_and_validate
from lecture_briefs.services.fallback_service import build_fallback_summaries
from lecture_briefs.services.language_enforcement import enforce_language
from lecture_briefs.services.language_service import resolve_target_language
from lecture_briefs.services.llm_service import temperature_for_attempt
from lecture_briefs.services.prompt_registry import build_brief_prompt
from lecture_briefs.services.usage_service import UsageLedger


MAX_REASON_CHARS = 300


@dataclass
class BatchOutcome:
    batch_number: int
    attempts: int = 0
    fallback: bool = False
    reason: Optional[str] = None
    replaced_pages: List[int] = field(default_factory=list)
    page_summaries: List[PageSummary] = field(default_factory=list)


def renumber_for_batch(pages: Sequence[PageSummary], batch: Batch) -> List[PageSummary]:
    return [
        page.renumbered(batch.start_index + offset + 1, batch.pages[offset].index)
        for offset, page in enumerate(pages)
    ]


def _describe_error(exc):
    return f'{type(exc).__name__}: {exc}'[:MAX_REASON_CHARS]


async def _run_batch(batch, invoker, language, settings, ledger, sleep) -> BatchOutcome:
    outcome = BatchOutcome(batch_number=batch.batch_number)
    last_error = None
    for attempt in range(1, settings.max_retry_attempts + 1):
        outcome.attempts = attempt
        try:
            prompt = build_brief_prompt(batch, language, settings)
            temperature = temperature_for_attempt(
                settings.temperature,
                attempt,
                minimum=settings.min_temperature,
                step=settings.temperature_step,
            )
            reply = await invoker.invoke(prompt, temperature)
            ledger.record(reply.usage)

            validated = parse_and_validate(reply.text, batch, language, settings)
            enforced, replaced = enforce_language(validated, language, settings)
            model_pages = [page for page in validated.page_summaries if not page.fallback]
            if not model_pages:
                raise BriefShapeError(f'No usable page summary in batch {batch.batch_number}.')
            if len(replaced) == len(model_pages):
                raise LanguageMismatchError(f'Every page in batch {batch.batch_number} came back outside {language}.')

            outcome.replaced_pages = replaced
            outcome.page_summaries = renumber_for_batch(enforced.page_summaries, batch)
            return outcome
        except Exception as exc:
            last_error = exc
            log_event(
                logging.WARNING,
                'brief_batch_attempt_failed',
                batch=batch.batch_number,
                attempt=attempt,
                max_attempts=settings.max_retry_attempts,
                error_type=type(exc).__name__,
                error=str(exc)[:MAX_REASON_CHARS],
            )
            if attempt < settings.max_retry_attempts:
                await sleep(settings.retry_delay_seconds)

    outcome.fallback = True
    outcome.reason = _describe_error(last_error)
    outcome.page_summaries = build_fallback_summaries(batch, language, settings)
    language_only = isinstance(last_error, LanguageMismatchError)
    log_event(
        logging.WARNING if language_only else logging.ERROR,
        'brief_batch_fallback',
        batch=batch.batch_number,
        attempts=outcome.attempts,
        pages=batch.page_numbers,
        reason=outcome.reason,
        language_only=language_only,
    )
    if not language_only:
        sentry_sdk.capture_exception(last_error)
    return outcome


def _summarize_fallbacks(outcomes):
    failed = [outcome for outcome in outcomes if outcome.fallback]
    if not failed:
        return None
    parts = [
        f'batch {outcome.batch_number} used placeholder content after {outcome.attempts} attempt(s) ({outcome.reason})'
        for outcome in failed
    ]
    return 'Some pages could not be summarized: ' + '; '.join(parts)


async def run_brief_pipeline(
    raw_pages,
    invoker,
    *,
    settings: Optional[BriefSettings] = None,
    target_language: Optional[str] = None,
    ledger: Optional[UsageLedger] = None,
    sleep=asyncio.sleep,
) -> Tuple[BriefResult, List[BatchOutcome]]:
    """Like ``generate_brief`` but also returns the per-batch outcomes."""
    settings = settings or BriefSettings()
    ledger = ledger if ledger is not None else UsageLedger()
    pages = extract_pages(raw_pages)
    language = resolve_target_language(pages, target_language)
    batches = plan_batches(pages, settings)

    if not batches:
        log_event(logging.INFO, 'brief_completed', pages=0, batches=0, fallback_batches=0, language=language)
        return BriefResult(), []

    log_event(
        logging.INFO,
        'brief_batch_planned',
        pages=sum(len(batch.pages) for batch in batches),
        batches=len(batches),
        chars=[batch.char_count for batch in batches],
        single_call=len(batches) == 1,
        language=language,
    )

    outcomes: List[BatchOutcome] = []
    for group in group_batches(batches, settings.max_parallel_batches):
        results = await asyncio.gather(*(
            _run_batch(batch, invoker, language, settings, ledger, sleep)
            for batch in group
        ))
        outcomes.extend(results)

    page_summaries = sorted(
        (page for outcome in outcomes for page in outcome.page_summaries),
        key=lambda page: page.page_number,
    )
    result = BriefResult(page_summaries=page_summaries, error=_summarize_fallbacks(outcomes))
    log_event(
        logging.INFO,
        'brief_completed',
        pages=len(page_summaries),
        batches=len(batches),
        fallback_batches=sum(1 for outcome in outcomes if outcome.fallback),
        replaced_pages=sum(len(outcome.replaced_pages) for outcome in outcomes),
        requests=ledger.requests,
        total_tokens=ledger.total_tokens,
        language=language,
    )
    return result, outcomes


async def generate_brief(
    raw_pages,
    invoker,
    *,
    settings: Optional[BriefSettings] = None,
    target_language: Optional[str] = None,
    ledger: Optional[UsageLedger] = None,
    sleep=asyncio.sleep,
) -> BriefResult:
    result, _outcomes = await run_brief_pipeline(
        raw_pages,
        invoker,
        settings=settings,
        target_language=target_language,
        ledger=ledger,
        sleep=sleep,
    )
    return result
