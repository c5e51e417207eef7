"""Value objects shared by the brief pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional


GEORGIAN = 'Georgian'
ENGLISH = 'English'
SUPPORTED_LANGUAGES = (GEORGIAN, ENGLISH)


@dataclass(frozen=True)
class PageText:
    index: int
    content: str

    @property
    def is_blank(self) -> bool:
        return not self.content.strip()


@dataclass(frozen=True)
class Batch:
    pages: List[PageText]
    start_index: int
    batch_number: int = 1

    @property
    def page_numbers(self) -> List[int]:
        return [self.start_index + offset + 1 for offset in range(len(self.pages))]

    @property
    def char_count(self) -> int:
        return sum(len(page.content) for page in self.pages)


@dataclass(frozen=True)
class PageSummary:
    page_number: int
    title: str
    summary: str
    source_index: Optional[int] = None
    fallback: bool = False

    def renumbered(self, page_number: int, source_index: Optional[int] = None) -> 'PageSummary':
        return replace(
            self,
            page_number=page_number,
            source_index=self.source_index if source_index is None else source_index,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            'pageNumber': self.page_number,
            'title': self.title,
            'summary': self.summary,
        }


@dataclass(frozen=True)
class BriefResult:
    page_summaries: List[PageSummary] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return any(page.fallback for page in self.page_summaries)

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            'pageSummaries': [page.to_dict() for page in self.page_summaries],
        }
        if self.error:
            payload['error'] = self.error
        return payload


@dataclass(frozen=True)
class LanguageAnalysis:
    language: str
    confidence: float
    details: Dict[str, int]
