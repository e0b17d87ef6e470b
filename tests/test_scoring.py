import pytest

from hadal.assessment import AssessmentRequest, ScoringEngine, Subscores, SubscoreWeights
from hadal.assessment.scoring import round_half_up, tokenize, weighted_overall


@pytest.fixture
def scorer():
    return ScoringEngine()


def make_request(level_config, transcript, prompt="What is your name?", duration=35.0):
    return AssessmentRequest(
        prompt_text=prompt,
        transcript=transcript,
        level_config=level_config,
        recording_duration_seconds=duration,
    )


def test_introduction_answer_breakdown(scorer, level1):
    breakdown = scorer.score(make_request(level1, "My name is Amina and I am from Hargeisa."))
    assert breakdown.subscores == Subscores(relevance=50, grammar=100, fluency=70, pronunciation=85)
    assert breakdown.overall_score == 73


def test_empty_transcript_scores_zero(scorer, level1):
    for transcript in ("", "   ", "\n\t"):
        breakdown = scorer.score(make_request(level1, transcript))
        assert breakdown.subscores == Subscores()
        assert breakdown.overall_score == 0


def test_scoring_is_deterministic(scorer, level1):
    request = make_request(level1, "I think my town is small but it is very beautiful.")
    assert scorer.score(request) == scorer.score(request)


def test_unrelated_answer_has_no_relevance(scorer):
    assert scorer.relevance("What is your name?", "um uh I don't know") == 0


def test_relevance_without_content_words_is_neutral(scorer):
    assert scorer.relevance("What is it?", "Yes.") == 50


def test_relevance_length_bonus(scorer):
    prompt = "What is it?"
    assert scorer.relevance(prompt, "x" * 49) == 50
    assert scorer.relevance(prompt, "x" * 50) == 60
    assert scorer.relevance(prompt, "x" * 100) == 70


def test_relevance_substring_match(scorer):
    # prompt word "friend" sits inside the answer word "friends"
    assert scorer.relevance("Describe friend", "My friends are kind.") == 100


def test_relevance_ignores_answer_words_inside_prompt_words(scorer):
    # "the" is inside "weather" and "cook" inside "cooking"; neither counts
    assert scorer.relevance("Describe the weather there.", "I love the football games.") == 0
    assert scorer.relevance("Describe cooking", "I cook.") == 0


def test_grammar_penalties(scorer):
    assert scorer.grammar("me am happy") == 75
    assert scorer.grammar("I are happy.") == 80


def test_grammar_is_clamped(scorer):
    assert scorer.grammar("The cat is on the mat. The dog is in the house.") == 100


def test_fluency_filler_penalty(scorer):
    text = "um uh um uh like"
    assert scorer.fluency(text, len(tokenize(text))) == 51


def test_fluency_rewards_length_and_connectives(scorer):
    text = ("I think reading is important because it teaches us new ideas. "
            "Also it helps me relax after school and then I sleep well.")
    assert scorer.fluency(text, len(tokenize(text))) == 100


def test_pronunciation_hesitation_penalty_is_capped(scorer, level1):
    assert scorer.pronunciation("um um um um um um", 0.0, level1) == 45


def test_pronunciation_duration_bands(scorer, level1):
    text = "I like football"
    assert scorer.pronunciation(text, 35.0, level1) == 80
    assert scorer.pronunciation(text, 20.0, level1) == 70
    assert scorer.pronunciation(text, 5.0, level1) == 60
    assert scorer.pronunciation(text, 120.0, level1) == 70


def test_subscores_stay_in_range(scorer, provider):
    samples = [
        "a",
        "um " * 50,
        "me am me is me have I are you is they is",
        "Word. " * 80,
        "I think, in my opinion, however, because, therefore, and so on. " * 10,
    ]
    for config in provider:
        for text in samples:
            breakdown = scorer.score(make_request(config, text, duration=config.max_duration_seconds))
            for value in breakdown.subscores.as_tuple():
                assert 0 <= value <= 100
            assert 0 <= breakdown.overall_score <= 100


def test_weighted_overall_rounds_half_up():
    weights = SubscoreWeights(50, 50, 0, 0)
    assert weighted_overall(Subscores(1, 0, 0, 0), weights) == 1
    assert weighted_overall(Subscores(1, 1, 0, 0), weights) == 1
    assert weighted_overall(Subscores(50, 50, 50, 51), SubscoreWeights(30, 15, 25, 30)) == 50


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert round_half_up(0) == 0


def test_tokenize_keeps_apostrophes():
    assert tokenize("I don't KNOW, 42!") == ["i", "don't", "know", "42"]
