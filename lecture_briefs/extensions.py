import json
import os
from dataclasses import dataclass
from typing import Any, Optional

import firebase_admin
import sentry_sdk
from firebase_admin import credentials, firestore
from flask import current_app
from google import genai
from sentry_sdk.integrations.flask import FlaskIntegration

from .config import AppConfig
from .logging_config import logger
from .services.llm_service import GeminiBriefInvoker


EXTENSION_KEY = 'lecture_briefs'


@dataclass
class BriefRuntime:
    """Per-app handles to the external services a request may need."""

    config: AppConfig
    gemini_client: Optional[Any] = None
    db: Optional[Any] = None
    firebase_init_error: str = ''

    @property
    def gemini_ready(self) -> bool:
        return self.gemini_client is not None

    @property
    def firestore_ready(self) -> bool:
        return self.db is not None

    def build_invoker(self) -> GeminiBriefInvoker:
        return GeminiBriefInvoker(
            self.gemini_client,
            self.config.brief_model,
            max_output_tokens=self.config.brief.max_output_tokens,
        )


def init_sentry(config: AppConfig) -> bool:
    if not config.sentry_dsn:
        return False
    sentry_sdk.init(
        dsn=config.sentry_dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=config.sentry_traces_sample_rate,
        send_default_pii=False,
        environment=config.sentry_environment,
        release=config.sentry_release,
    )
    return True


def init_gemini(config: AppConfig):
    if not config.gemini_api_key:
        logger.info("GEMINI_API_KEY not set; brief generation is disabled.")
        return None
    try:
        return genai.Client(api_key=config.gemini_api_key)
    except Exception as e:
        logger.info(f"Gemini client disabled: {e}")
        return None


def init_firestore(config: AppConfig):
    """Return ``(db, error)``; ``db`` is None when credentials are unavailable."""
    try:
        if config.firebase_credentials_path and os.path.exists(config.firebase_credentials_path):
            cred = credentials.Certificate(config.firebase_credentials_path)
        else:
            if not config.firebase_credentials_json:
                raise ValueError("FIREBASE_CREDENTIALS is not set and the credentials file was not found.")
            cred = credentials.Certificate(json.loads(config.firebase_credentials_json))
        if not firebase_admin._apps:
            firebase_admin.initialize_app(cred)
        return firestore.client(), ''
    except Exception as e:
        logger.info(f"Firebase initialization skipped: {e}")
        return None, str(e)


def init_extensions(app, config: AppConfig) -> BriefRuntime:
    init_sentry(config)
    db, firebase_error = init_firestore(config)
    runtime = BriefRuntime(
        config=config,
        gemini_client=init_gemini(config),
        db=db,
        firebase_init_error=firebase_error,
    )
    app.extensions[EXTENSION_KEY] = runtime
    return runtime


def get_runtime(app=None) -> BriefRuntime:
    return (app or current_app).extensions[EXTENSION_KEY]
