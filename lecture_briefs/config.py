import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


DEV_ENV_NAMES = {'development', 'dev', 'local', 'test'}


def safe_int_env(name, default=0, minimum=1, maximum=100000):
    raw = (os.getenv(name, str(default)) or '').strip()
    try:
        value = int(raw)
    except Exception:
        return default
    return min(max(value, minimum), maximum)


def safe_float_env(name, default=0.0, minimum=0.0, maximum=1.0):
    raw = (os.getenv(name, str(default)) or '').strip()
    try:
        value = float(raw)
    except Exception:
        return default
    return min(max(value, minimum), maximum)


@dataclass(frozen=True)
class BriefSettings:
    """Tuning knobs for the brief generation pipeline."""

    pages_per_batch: int = 12
    small_document_page_limit: int = 15
    single_call_max_chars: int = 50000
    max_parallel_batches: int = 3
    max_retry_attempts: int = 2
    retry_delay_seconds: float = 1.0
    temperature: float = 0.5
    min_temperature: float = 0.1
    temperature_step: float = 0.1
    max_output_tokens: int = 8192
    min_words_per_page: int = 200
    target_words_per_page: int = 280
    max_words_per_page: int = 350
    language_min_confidence: float = 0.8
    language_mixing_tolerance: float = 0.1
    max_pages_per_request: int = 400


def load_brief_settings() -> BriefSettings:
    return BriefSettings(
        pages_per_batch=safe_int_env('BRIEF_PAGES_PER_BATCH', 12, minimum=1, maximum=50),
        max_parallel_batches=safe_int_env('BRIEF_MAX_PARALLEL_BATCHES', 3, minimum=1, maximum=10),
        max_retry_attempts=safe_int_env('BRIEF_MAX_RETRY_ATTEMPTS', 2, minimum=1, maximum=5),
        retry_delay_seconds=safe_float_env('BRIEF_RETRY_DELAY_SECONDS', 1.0, minimum=0.0, maximum=30.0),
        temperature=safe_float_env('BRIEF_TEMPERATURE', 0.5, minimum=0.0, maximum=2.0),
        max_output_tokens=safe_int_env('BRIEF_MAX_OUTPUT_TOKENS', 8192, minimum=256, maximum=65536),
    )


@dataclass(frozen=True)
class AppConfig:
    """Central config object for the app factory."""

    flask_secret_key: str = ''
    log_level: str = 'INFO'
    gemini_api_key: str = ''
    brief_model: str = 'gemini-2.5-flash-lite'
    sentry_dsn: str = ''
    sentry_environment: str = 'production'
    sentry_release: str = 'lecture-briefs'
    sentry_traces_sample_rate: float = 0.0
    firebase_credentials_path: str = 'firebase-credentials.json'
    firebase_credentials_json: str = ''
    brief: BriefSettings = field(default_factory=BriefSettings)


def resolve_runtime_env():
    return (
        os.getenv('SENTRY_ENVIRONMENT')
        or os.getenv('FLASK_ENV')
        or os.getenv('ENV')
        or ('production' if os.getenv('RENDER') else 'development')
    ).strip().lower()


def load_config() -> AppConfig:
    load_dotenv()
    config = AppConfig(
        flask_secret_key=os.getenv('FLASK_SECRET_KEY', ''),
        log_level=(os.getenv('LOG_LEVEL', 'INFO') or 'INFO').strip().upper(),
        gemini_api_key=(os.getenv('GEMINI_API_KEY', '') or '').strip(),
        brief_model=(os.getenv('BRIEF_MODEL', 'gemini-2.5-flash-lite') or 'gemini-2.5-flash-lite').strip(),
        sentry_dsn=(os.getenv('SENTRY_DSN', '') or '').strip(),
        sentry_environment=(os.getenv('SENTRY_ENVIRONMENT', os.getenv('FLASK_ENV', 'production')) or 'production').strip(),
        sentry_release=(os.getenv('SENTRY_RELEASE', 'lecture-briefs') or 'lecture-briefs').strip(),
        sentry_traces_sample_rate=safe_float_env('SENTRY_TRACES_SAMPLE_RATE', 0.0),
        firebase_credentials_path=(os.getenv('FIREBASE_CREDENTIALS_PATH', 'firebase-credentials.json') or '').strip(),
        firebase_credentials_json=(os.getenv('FIREBASE_CREDENTIALS', '') or '').strip(),
        brief=load_brief_settings(),
    )
    is_dev_like = resolve_runtime_env() in DEV_ENV_NAMES
    if not is_dev_like and not config.flask_secret_key.strip():
        raise RuntimeError('FLASK_SECRET_KEY must be set in non-development environments.')
    return config
