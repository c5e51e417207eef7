"""Thin async wrapper around the Gemini generation endpoint."""

from dataclasses import dataclass, field

from google.genai import types

from lecture_briefs.errors import EmptyResponseError
from lecture_briefs.services.usage_service import TokenUsage, usage_from_metadata


def temperature_for_attempt(base, attempt, minimum=0.1, step=0.1):
    """Lower the temperature a little on every retry, never below ``minimum``."""
    return max(minimum, round(base - step * (max(1, attempt) - 1), 4))


@dataclass(frozen=True)
class LLMReply:
    text: str
    usage: TokenUsage = field(default_factory=TokenUsage)


def build_generation_config(temperature, max_output_tokens):
    return types.GenerateContentConfig(
        temperature=temperature,
        max_output_tokens=max_output_tokens,
        top_p=0.95,
        top_k=40,
    )


class GeminiBriefInvoker:
    """Issues one generation request per call. Errors are left to the caller."""

    def __init__(self, client, model, max_output_tokens=8192):
        self.client = client
        self.model = model
        self.max_output_tokens = max_output_tokens

    async def invoke(self, prompt, temperature):
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=[types.Content(role='user', parts=[types.Part.from_text(text=prompt)])],
            config=build_generation_config(temperature, self.max_output_tokens),
        )
        text = (getattr(response, 'text', None) or '').strip()
        if not text:
            raise EmptyResponseError('Model returned an empty response.')
        return LLMReply(text=text, usage=usage_from_metadata(getattr(response, 'usage_metadata', None)))
