"""Exceptions raised inside the brief generation pipeline.

None of these escape ``generate_brief``: the orchestrator retries or falls
back to placeholder content when they occur.
"""


class BriefError(Exception):
    """Base class for brief pipeline failures."""


class BriefParseError(BriefError):
    """The model response could not be parsed as JSON."""


class BriefShapeError(BriefError):
    """The model response parsed but does not have the expected shape."""


class LanguageMismatchError(BriefError):
    """Every page of a batch came back in the wrong language."""


class EmptyResponseError(BriefError):
    """The model returned no text at all."""
