"""
Pydantic models for a session analysis.

Field aliases follow the JSON contract used with the language model
(``t``/``type`` on tokens, ``paceScore``, ``fillerBreakdown`` ...). Models
are frozen: an analysis is produced once per session and never changed.
Use ``to_payload()`` for the wire form.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TokenKind = Literal['word', 'filler', 'pause']


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True, populate_by_name=True, extra='ignore', allow_inf_nan=False
    )

    def to_payload(self) -> Dict[str, Any]:
        """Serialize using the wire aliases."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Token(_FrozenModel):
    """A single word, filler or pause inside a segment."""

    text: str = Field(alias='t')
    kind: TokenKind = Field(alias='type')
    start_ms: int = Field(ge=0)
    end_ms: int = Field(ge=0)

    @model_validator(mode='after')
    def _check_span(self) -> 'Token':
        if self.end_ms < self.start_ms:
            raise ValueError(f"Token '{self.text}' ends before it starts")
        return self


class Segment(_FrozenModel):
    """A time span of the transcript with its tokens."""

    start_ms: int = Field(ge=0)
    end_ms: int = Field(ge=0)
    text: str
    tokens: List[Token] = Field(default_factory=list)

    @model_validator(mode='after')
    def _check_tokens(self) -> 'Segment':
        if self.end_ms < self.start_ms:
            raise ValueError("Segment ends before it starts")
        for previous, current in zip(self.tokens, self.tokens[1:]):
            if current.start_ms < previous.end_ms:
                raise ValueError(
                    f"Tokens overlap or are out of order at {current.start_ms}ms"
                )
        return self


class Metrics(_FrozenModel):
    """Per-session delivery metrics."""

    total_words: int = Field(ge=0)
    words_per_minute: float = Field(ge=0)
    total_fillers: int = Field(ge=0)
    fillers_per_minute: float = Field(ge=0)
    avg_pause_ms: float = Field(ge=0)
    energy_mean: float
    pitch_median_hz: float = Field(ge=0)
    clarity_score: float = Field(ge=0, le=1)
    confidence: float = Field(ge=0, le=1)
    pace_score: float = Field(ge=0, le=100, alias='paceScore')
    filler_improvement: float = Field(ge=0, le=100, alias='fillerImprovement')


class Highlight(_FrozenModel):
    """A notable span for annotation (a filler, a long pause ...)."""

    kind: str = Field(alias='type', min_length=1)
    start_ms: int = Field(ge=0)
    end_ms: int = Field(ge=0)
    text: Optional[str] = None
    duration_ms: Optional[int] = Field(default=None, ge=0)


class Recommendation(_FrozenModel):
    """An advisory coaching tip."""

    id: str = Field(min_length=1)
    text: str
    description: str


class Analysis(_FrozenModel):
    """Complete analysis of one practice session."""

    transcript: List[Segment] = Field(min_length=1)
    metrics: Metrics
    filler_breakdown: Dict[str, int] = Field(alias='fillerBreakdown')
    highlights: List[Highlight] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    score: int = Field(ge=0, le=100)

    @field_validator('transcript')
    @classmethod
    def _check_segment_order(cls, segments: List[Segment]) -> List[Segment]:
        for previous, current in zip(segments, segments[1:]):
            if current.start_ms < previous.start_ms:
                raise ValueError("Segments are not in time order")
        return segments

    @field_validator('filler_breakdown')
    @classmethod
    def _check_breakdown(cls, breakdown: Dict[str, int]) -> Dict[str, int]:
        for filler, count in breakdown.items():
            if count < 0:
                raise ValueError(f"Negative count for filler '{filler}'")
        return breakdown
