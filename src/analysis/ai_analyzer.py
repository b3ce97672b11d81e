"""
Language-model assisted transcript analysis.

Analysis is a two-path computation:

- ``try_external_analysis`` makes one bounded call to the language model and
  either returns an Analysis or raises ExternalAnalysisUnavailable.
- ``fallback_analysis`` computes the same shape locally and always succeeds.

``AIAnalyzer.analyze`` composes them. When the model answers, its payload is
merged field by field: anything missing or invalid is taken from the
fallback, everything valid from the model is kept. When the model does not
answer usably, the fallback result is returned as is.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from src.analysis.fallback_analyzer import fallback_analysis
from src.analysis.models import Analysis, Metrics
from src.errors import ExternalAnalysisUnavailable, validate_analysis_input
from src.llm.llm_client import LLMClient
from src.llm.prompt_templates import ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt

logger = logging.getLogger(__name__)

DEFAULT_ANALYSIS_TIMEOUT = 30.0
DEFAULT_TEMPERATURE = 0.2

# (field name, wire key) pairs, merged independently
ANALYSIS_FIELDS: List[Tuple[str, str]] = [
    ('transcript', 'transcript'),
    ('filler_breakdown', 'fillerBreakdown'),
    ('highlights', 'highlights'),
    ('recommendations', 'recommendations'),
    ('score', 'score'),
]
METRIC_FIELDS: List[Tuple[str, str]] = [
    (name, info.alias or name) for name, info in Metrics.model_fields.items()
]
NUMERIC_FIELDS = {'score'} | {name for name, _ in METRIC_FIELDS}

_MISSING = object()


def parse_analysis_payload(text: str) -> Dict[str, Any]:
    """
    Parse the model's response text into a JSON object.

    Markdown code fences around the JSON are tolerated.

    Args:
        text: Raw response text

    Returns:
        Parsed JSON object

    Raises:
        ExternalAnalysisUnavailable: If the text is empty, not JSON, or not an object
    """
    cleaned = (text or '').strip()
    if cleaned.startswith('```'):
        lines = [ln for ln in cleaned.split('\n') if not ln.strip().startswith('```')]
        cleaned = '\n'.join(lines).strip()

    if not cleaned:
        raise ExternalAnalysisUnavailable("Empty analysis response")

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ExternalAnalysisUnavailable(f"Unparsable analysis JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ExternalAnalysisUnavailable(
            f"Analysis payload is {type(payload).__name__}, expected an object"
        )
    return payload


def _lookup(payload: Dict[str, Any], name: str, alias: str) -> Any:
    if alias in payload:
        return payload[alias]
    return payload.get(name, _MISSING)


def _accept(model: type, base: Dict[str, Any], name: str, alias: str, value: Any) -> bool:
    """Whether ``value`` validates in place of ``base[alias]``."""
    if value is _MISSING or value is None:
        return False
    if name in NUMERIC_FIELDS and isinstance(value, bool):
        return False
    try:
        model.model_validate({**base, alias: value})
    except ValidationError as e:
        logger.debug(f"Rejected model value for '{alias}': {e.error_count()} error(s)")
        return False
    return True


def merge_analysis(payload: Dict[str, Any], fallback: Analysis) -> Tuple[Analysis, List[str]]:
    """
    Merge a model payload over a fallback analysis, field by field.

    Args:
        payload: Parsed JSON object from the model
        fallback: Deterministic analysis of the same transcript

    Returns:
        Tuple of (merged Analysis, wire keys that were filled from the fallback)
    """
    base = fallback.model_dump(by_alias=True)
    merged = dict(base)
    filled: List[str] = []

    for name, alias in ANALYSIS_FIELDS:
        value = _lookup(payload, name, alias)
        if _accept(Analysis, base, name, alias, value):
            merged[alias] = value
        else:
            filled.append(alias)

    base_metrics = base['metrics']
    merged_metrics = dict(base_metrics)
    payload_metrics = payload.get('metrics')
    if isinstance(payload_metrics, dict):
        for name, alias in METRIC_FIELDS:
            value = _lookup(payload_metrics, name, alias)
            if _accept(Metrics, base_metrics, name, alias, value):
                merged_metrics[alias] = value
            else:
                filled.append(f"metrics.{alias}")
    else:
        filled.append('metrics')
    merged['metrics'] = merged_metrics

    return Analysis.model_validate(merged), filled


class AIAnalyzer:
    """
    Transcript analyzer backed by a language model with a local fallback.

    Attributes:
        client: LLM client used for the analysis call
        timeout: Seconds to wait for the model before falling back
        temperature: Sampling temperature for the call
        use_model: Whether the language model is consulted at all
    """

    def __init__(
        self,
        client: Optional[LLMClient] = None,
        timeout: float = DEFAULT_ANALYSIS_TIMEOUT,
        temperature: float = DEFAULT_TEMPERATURE,
        use_model: bool = True,
    ):
        """
        Initialize the analyzer.

        Args:
            client: LLM client (a default client is built from env vars if omitted)
            timeout: Seconds to wait for the model before falling back
            temperature: Sampling temperature for the call
            use_model: When False, every analysis is the local fallback
        """
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.use_model = use_model
        self.client = client if client is not None or not use_model else LLMClient()
        self.timeout = timeout
        self.temperature = temperature

    def try_external_analysis(
        self,
        transcript: str,
        duration_seconds: float,
        fallback: Optional[Analysis] = None,
    ) -> Analysis:
        """
        Ask the model for an analysis and merge it over the fallback.

        Args:
            transcript: Non-empty transcript text
            duration_seconds: Positive session duration in seconds
            fallback: Precomputed fallback analysis of the same input

        Returns:
            Merged Analysis

        Raises:
            ExternalAnalysisUnavailable: If the call fails, times out or the
                payload cannot be parsed
        """
        if not self.use_model or self.client is None:
            raise ExternalAnalysisUnavailable("Model analysis is disabled")
        if fallback is None:
            fallback = fallback_analysis(transcript, duration_seconds)

        try:
            response = self.client.generate(
                build_analysis_prompt(transcript, duration_seconds),
                system=ANALYSIS_SYSTEM_PROMPT,
                temperature=self.temperature,
                json_mode=True,
                timeout=self.timeout,
            )
        except Exception as e:
            raise ExternalAnalysisUnavailable(f"Analysis call raised: {e}") from e

        if response is None:
            raise ExternalAnalysisUnavailable("Analysis call failed or timed out")

        payload = parse_analysis_payload(response.text)
        try:
            analysis, filled = merge_analysis(payload, fallback)
        except ValidationError as e:
            raise ExternalAnalysisUnavailable(f"Merged analysis is invalid: {e}") from e

        if filled:
            logger.info(f"Model analysis merged; filled from fallback: {', '.join(filled)}")
        else:
            logger.info("Model analysis accepted in full")
        return analysis

    def analyze(self, transcript: str, duration_seconds: float) -> Analysis:
        """
        Analyze a transcript, never failing past input validation.

        Args:
            transcript: Transcript text (must not be blank)
            duration_seconds: Session duration in seconds (must be positive)

        Returns:
            Complete Analysis

        Raises:
            InvalidInput: If the transcript is blank or the duration is not positive
        """
        text = validate_analysis_input(transcript, duration_seconds)
        fallback = fallback_analysis(text, duration_seconds)
        if not self.use_model:
            return fallback

        try:
            return self.try_external_analysis(text, duration_seconds, fallback=fallback)
        except ExternalAnalysisUnavailable as e:
            logger.warning(f"Using fallback analysis: {e}")
            return fallback
