import json
import logging


logger = logging.getLogger('lecture_briefs')


def configure_logging(level: str = 'INFO') -> None:
    """Idempotent logging setup for app-factory flow."""
    root = logging.getLogger()
    if root.handlers:
        return
    numeric_level = getattr(logging, str(level or 'INFO').upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
    )


def log_event(level, event, **fields):
    payload = {'event': event}
    for key, value in fields.items():
        payload[str(key)] = value
    logger.log(level, json.dumps(payload, ensure_ascii=True, default=str))
