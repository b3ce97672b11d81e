"""
Prompt templates for LLM-powered speech analysis.

The system prompt fixes the JSON shape the analyzer expects back; the user
prompt embeds the transcript and its duration.
"""

ANALYSIS_RESPONSE_SHAPE = """{
  "transcript": [
    {
      "start_ms": 0,
      "end_ms": 1000,
      "text": "segment text",
      "tokens": [
        {"t": "word", "type": "word", "start_ms": 0, "end_ms": 500},
        {"t": "um", "type": "filler", "start_ms": 500, "end_ms": 700}
      ]
    }
  ],
  "metrics": {
    "total_words": 50,
    "words_per_minute": 120,
    "total_fillers": 5,
    "fillers_per_minute": 12,
    "avg_pause_ms": 300,
    "energy_mean": -20,
    "pitch_median_hz": 180,
    "clarity_score": 0.85,
    "confidence": 0.90,
    "paceScore": 75,
    "fillerImprovement": 20
  },
  "fillerBreakdown": {
    "um": 3,
    "uh": 2,
    "like": 1
  },
  "highlights": [
    {"type": "filler", "start_ms": 0, "end_ms": 200, "text": "um"},
    {"type": "long_pause", "start_ms": 5000, "end_ms": 7000, "duration_ms": 2000}
  ],
  "recommendations": [
    {
      "id": "rec-breathe",
      "text": "Practice deep breathing before speaking",
      "description": "Try the 4-6-4 breathing technique to reduce filler words"
    }
  ],
  "score": 82
}"""

ANALYSIS_SYSTEM_PROMPT = f"""You are a speech coach analyzing a practice session. Analyze the provided transcript for speech patterns and provide detailed feedback.

Your analysis should include:
1. Filler word detection (um, uh, like, you know, etc.)
2. Speech metrics (words per minute, clarity assessment)
3. Energy and confidence evaluation
4. Specific recommendations for improvement

Rules:
- Token "type" is one of: word, filler, pause
- Tokens inside a segment are in time order and do not overlap
- clarity_score and confidence are between 0 and 1
- paceScore, fillerImprovement and score are between 0 and 100

Respond with JSON in this exact format:
{ANALYSIS_RESPONSE_SHAPE}"""


def build_analysis_prompt(transcript: str, duration_seconds: float) -> str:
    """
    Build the user prompt for a transcript analysis.

    Args:
        transcript: Transcript text
        duration_seconds: Session duration in seconds

    Returns:
        Formatted prompt string
    """
    return f"""Please analyze this speech transcript:

Transcript: "{transcript}"
Duration: {duration_seconds:g} seconds

Provide detailed analysis focusing on filler words, speaking pace, clarity, and overall performance. Calculate an overall score from 0-100 based on the quality of the speech."""
