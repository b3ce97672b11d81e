"""Tests for the overall session score."""

import pytest

from src.metrics.scoring import calculate_overall_score

SCENARIO_TEXT = "I think um this is uh a good idea you know"


class TestCalculateOverallScore:
    """Test suite for calculate_overall_score."""

    def test_short_session_with_fillers(self):
        """Test the worked example: 11 words, 2 fillers, 10 seconds."""
        # 100 - 5.4545 = 94.5455
        # * 0.8 + 40 * 0.2 = 83.6364
        # * 0.8 + 63.6364 * 0.2 = 79.6364
        # - 10 (under 30 s) = 69.6364 -> 70
        assert calculate_overall_score(SCENARIO_TEXT, 10) == 70

    def test_blending_is_sequential(self):
        """Test the result differs from a single weighted sum."""
        text = " ".join(["um"] * 4)
        # Sequential: 70 -> 64 -> 57.2 -> 47.2 -> 47
        assert calculate_overall_score(text, 10) == 47

    def test_long_clean_session_clamps_to_100(self):
        """Test the +5 bonus cannot push the score past 100."""
        text = " ".join(["word"] * 250)  # 125 wpm over 120 s
        assert calculate_overall_score(text, 120) == 100

    def test_short_clean_session_penalty(self):
        """Test the -10 penalty under 30 seconds."""
        text = " ".join(["hello"] * 10)  # 120 wpm over 5 s
        assert calculate_overall_score(text, 5) == 90

    def test_no_duration_adjustment_between_thresholds(self):
        """Test 30-119 seconds gets neither bonus nor penalty."""
        text = " ".join(["word"] * 40)  # 40 wpm over 60 s, pace 40
        # 100 -> 88 -> 90.4
        assert calculate_overall_score(text, 60) == 90

    def test_duration_boundaries(self):
        """Test 30 s is not penalized and 120 s gets the bonus."""
        slow_text = " ".join(["word"] * 10)
        at_30 = calculate_overall_score(slow_text, 30)    # 20 wpm, pace 40
        under_30 = calculate_overall_score(slow_text, 29.9)
        assert at_30 - under_30 == 10

        long_slow = " ".join(["word"] * 40)
        at_120 = calculate_overall_score(long_slow, 120)  # 20 wpm
        under_120 = calculate_overall_score(" ".join(["word"] * 40), 119.9)
        assert at_120 - under_120 == 5

    def test_empty_text_has_no_filler_penalty(self):
        """Test zero words does not divide by zero."""
        score = calculate_overall_score("", 10)
        assert isinstance(score, int)

    @pytest.mark.parametrize("text,duration", [
        ("um", 1),
        ("um uh like so basically actually literally", 0.5),
        (SCENARIO_TEXT, 10),
        (" ".join(["word"] * 1000), 3600),
        ("hello", 600),
        ("a", 0.01),
    ])
    def test_score_is_bounded_integer(self, text, duration):
        """Test the score is always an int within [0, 100]."""
        score = calculate_overall_score(text, duration)
        assert isinstance(score, int)
        assert 0 <= score <= 100
