import pytest

from hadal.assessment import AssessmentRequest, FallbackFailure, FallbackScorer


@pytest.fixture
def fallback():
    return FallbackScorer()


def request_for(level_config, transcript, prompt="What is your name?"):
    return AssessmentRequest(prompt_text=prompt, transcript=transcript, level_config=level_config)


def test_base_score_grows_with_words_and_caps_at_70(fallback, level1):
    assert fallback.score(request_for(level1, "one two three")).overall_score == 29
    assert fallback.score(request_for(level1, " ".join(["word"] * 40))).overall_score == 70


def test_subscores_are_fixed_fractions_of_base(fallback, level1):
    breakdown = fallback.score(request_for(level1, " ".join(["word"] * 20)))
    assert breakdown.overall_score == 70
    assert breakdown.subscores.grammar == 63
    assert breakdown.subscores.fluency == 56
    assert abs(breakdown.subscores.pronunciation - 70 * 0.85) <= 0.5


def test_relevance_is_plain_word_overlap(fallback, level1):
    breakdown = fallback.score(request_for(level1, "my name is Amina"))
    # "is" and "name" out of what/is/your/name
    assert breakdown.subscores.relevance == 50


def test_relevance_with_empty_prompt(fallback, level1):
    breakdown = fallback.score(request_for(level1, "hello there", prompt="?"))
    assert breakdown.subscores.relevance == 50


def test_internal_errors_become_fallback_failure(fallback, level1):
    broken = AssessmentRequest(prompt_text=None, transcript=42, level_config=level1)
    with pytest.raises(FallbackFailure):
        fallback.score(broken)
