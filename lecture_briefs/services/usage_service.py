"""Token and cost accounting for model calls.

A ``UsageLedger`` is created by the caller and handed to the pipeline, so
totals are scoped to one brief instead of living in module state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


COST_PER_1M_INPUT_TOKENS = 0.075
COST_PER_1M_OUTPUT_TOKENS = 0.30


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    has_actual_counts: bool = False

    @property
    def cost(self) -> float:
        input_cost = (self.input_tokens / 1_000_000) * COST_PER_1M_INPUT_TOKENS
        output_cost = (self.output_tokens / 1_000_000) * COST_PER_1M_OUTPUT_TOKENS
        return input_cost + output_cost


def usage_from_metadata(usage_metadata) -> TokenUsage:
    if usage_metadata is None:
        return TokenUsage()
    input_tokens = int(getattr(usage_metadata, 'prompt_token_count', 0) or 0)
    output_tokens = int(getattr(usage_metadata, 'candidates_token_count', 0) or 0)
    total_tokens = int(getattr(usage_metadata, 'total_token_count', 0) or 0) or (input_tokens + output_tokens)
    return TokenUsage(
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        total_tokens=total_tokens,
        has_actual_counts=bool(input_tokens or output_tokens),
    )


@dataclass
class UsageLedger:
    entries: List[TokenUsage] = field(default_factory=list)

    def record(self, usage: TokenUsage) -> None:
        self.entries.append(usage)

    @property
    def requests(self) -> int:
        return len(self.entries)

    @property
    def input_tokens(self) -> int:
        return sum(entry.input_tokens for entry in self.entries)

    @property
    def output_tokens(self) -> int:
        return sum(entry.output_tokens for entry in self.entries)

    @property
    def total_tokens(self) -> int:
        return sum(entry.total_tokens for entry in self.entries)

    @property
    def total_cost(self) -> float:
        return sum(entry.cost for entry in self.entries)

    def to_dict(self) -> Dict[str, object]:
        return {
            'requests': self.requests,
            'input_tokens': self.input_tokens,
            'output_tokens': self.output_tokens,
            'total_tokens': self.total_tokens,
            'total_cost_usd': round(self.total_cost, 6),
        }
