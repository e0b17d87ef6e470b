import pytest

from hadal.assessment import (
    AnalysisMethod,
    AssessmentRequest,
    EnforcementPolicyEngine,
    EnforcementReason,
    EnforcementSettings,
    FeedbackGenerator,
    InvalidSubmission,
    Subscores,
)
from hadal.testing import (
    ExplodingFallback,
    ExplodingScorer,
    HangingScorer,
    ResultValidator,
    SlowScorer,
    StaticScorer,
)

PROMPT = "What is your name?"
ANSWER = "My name is Amina and I am from Hargeisa."


def request_for(config, transcript=ANSWER, prompt=PROMPT, duration=35.0):
    return AssessmentRequest(
        prompt_text=prompt, transcript=transcript, level_config=config,
        recording_duration_seconds=duration,
    )


def engine_with(provider, clock, scorer, **kwargs):
    return EnforcementPolicyEngine(
        scoring_engine=scorer, level_provider=provider, clock=clock, **kwargs
    )


def test_introduction_passes_level_one(engine):
    result = engine.submit(PROMPT, ANSWER, 1, 35)
    ResultValidator.assert_valid_result(result)
    assert result.passed is True
    assert result.analysis_method == AnalysisMethod.PRIMARY
    assert result.enforcement_reason is None
    assert result.required_threshold == 50
    assert result.overall_score == 73
    assert result.no_answer is False
    assert result.progression is not None
    assert result.progression.next_level == 2


def test_hesitant_non_answer_is_off_topic(engine):
    result = engine.submit(PROMPT, "um uh I don't know", 1, 31)
    ResultValidator.assert_valid_result(result)
    assert result.enforcement_reason == EnforcementReason.OFF_TOPIC
    assert result.overall_score == 0
    assert result.passed is False
    assert result.to_dict()["enforcementReason"] == "off_topic"


def test_unrelated_answer_is_off_topic(engine):
    result = engine.submit(
        "Describe the weather there.", "I love the football games with my family.", 1, 35
    )
    ResultValidator.assert_valid_result(result)
    assert result.subscores.relevance == 0
    assert result.enforcement_reason == EnforcementReason.OFF_TOPIC
    assert result.overall_score == 0
    assert result.passed is False


def test_empty_transcript_is_no_answer(engine):
    result = engine.submit(PROMPT, "   ", 2, 50)
    ResultValidator.assert_valid_result(result)
    assert result.no_answer is True
    assert result.overall_score == 0
    assert result.subscores == Subscores()
    assert result.passed is False
    assert result.enforcement_reason is None
    assert result.analysis_method == AnalysisMethod.PRIMARY
    assert result.required_threshold == 60
    assert result.feedback.summary.so == "Wax ma aadan hadlin. Rikoordka dib u bilow oo su'aasha ka jawaab."
    assert result.feedback.strengths == ()


def test_off_topic_skips_floor_smoothing(provider, clock):
    engine = engine_with(provider, clock, StaticScorer(10, 5, 5, 5, 40))
    result = engine.assess(request_for(provider.get(1)))
    assert result.enforcement_reason == EnforcementReason.OFF_TOPIC
    assert result.subscores == Subscores(10, 5, 5, 5)
    assert result.overall_score == 0


def test_relevance_boundary(provider, clock):
    at_min = engine_with(provider, clock, StaticScorer(30, 90, 90, 90, 80)).assess(request_for(provider.get(1)))
    below = engine_with(provider, clock, StaticScorer(29, 90, 90, 90, 80)).assess(request_for(provider.get(1)))
    assert at_min.enforcement_reason is None
    assert at_min.passed is True
    assert below.enforcement_reason == EnforcementReason.OFF_TOPIC
    assert below.passed is False


def test_floor_smoothing_raises_weak_subscores_only(provider, clock):
    engine = engine_with(provider, clock, StaticScorer(80, 5, 10, 15, 40))
    result = engine.assess(request_for(provider.get(1)))
    assert result.subscores == Subscores(80, 20, 20, 20)
    # overall comes from the raw subscores
    assert result.overall_score == 40
    assert result.passed is False


def test_floor_smoothing_can_be_disabled(provider, clock):
    engine = engine_with(provider, clock, StaticScorer(80, 5, 10, 15, 40))
    engine.update_settings(enable_floor_smoothing=False)
    result = engine.assess(request_for(provider.get(1)))
    assert result.subscores == Subscores(80, 5, 10, 15)


def test_score_72_passes_level_three_but_not_four(provider, clock):
    engine = engine_with(provider, clock, StaticScorer(80, 72, 72, 72, 72))
    assert engine.assess(request_for(provider.get(3))).passed is True
    assert engine.assess(request_for(provider.get(4))).passed is False


def test_passing_a_level_implies_passing_easier_levels(provider, clock):
    for overall in range(0, 101, 5):
        engine = engine_with(provider, clock, StaticScorer(60, 60, 60, 60, overall))
        outcomes = [engine.assess(request_for(config)).passed for config in provider]
        for easier, harder in zip(outcomes, outcomes[1:]):
            assert easier or not harder


def test_primary_exception_uses_fallback(provider, clock):
    scorer = ExplodingScorer()
    engine = engine_with(provider, clock, scorer)
    result = engine.assess(request_for(provider.get(3)))
    ResultValidator.assert_valid_result(result)
    assert scorer.calls == 1
    assert result.analysis_method == AnalysisMethod.FALLBACK
    assert result.required_threshold == 50
    # 9 words -> 47
    assert result.overall_score == 47
    assert result.passed is False


def test_slow_primary_uses_fallback(provider, clock):
    engine = engine_with(provider, clock, SlowScorer(clock, 2.5))
    result = engine.assess(request_for(provider.get(1)))
    assert result.analysis_method == AnalysisMethod.FALLBACK


def test_hanging_primary_is_abandoned(provider, clock):
    scorer = HangingScorer()
    engine = engine_with(
        provider, clock, scorer, settings=EnforcementSettings(scoring_timeout_seconds=0.05)
    )
    try:
        result = engine.assess(request_for(provider.get(1)))
        assert scorer.entered.is_set()
        assert result.analysis_method == AnalysisMethod.FALLBACK
        ResultValidator.assert_valid_result(result)
    finally:
        scorer.release.set()


def test_primary_within_time_budget_is_kept(provider, clock):
    engine = engine_with(provider, clock, SlowScorer(clock, 1.0))
    result = engine.assess(request_for(provider.get(1)))
    assert result.analysis_method == AnalysisMethod.PRIMARY
    assert result.overall_score == 73


def test_fallback_result_can_be_off_topic(provider, clock):
    engine = engine_with(provider, clock, ExplodingScorer())
    result = engine.assess(request_for(provider.get(1), transcript="bananas bananas bananas"))
    assert result.analysis_method == AnalysisMethod.FALLBACK
    assert result.enforcement_reason == EnforcementReason.OFF_TOPIC
    assert result.overall_score == 0


def test_failsafe_when_everything_fails(provider, clock):
    engine = engine_with(provider, clock, ExplodingScorer(), fallback_scorer=ExplodingFallback())
    result = engine.assess(request_for(provider.get(2)))
    ResultValidator.assert_valid_result(result)
    assert result.analysis_method == AnalysisMethod.FAILSAFE
    assert result.overall_score == 0
    assert result.subscores == Subscores()
    assert result.passed is False
    assert result.required_threshold == 60
    assert result.progression is None
    assert result.feedback.summary.so == "Khalad nidaam ah ayaa dhacay. Fadlan isku day mar kale."


def test_assess_never_raises(provider, clock):
    class BrokenFeedback(FeedbackGenerator):
        def generate(self, context):
            raise RuntimeError("template missing")

    engine = EnforcementPolicyEngine(
        level_provider=provider, clock=clock, feedback_generator=BrokenFeedback()
    )
    result = engine.assess(request_for(provider.get(1)))
    assert result.analysis_method == AnalysisMethod.FAILSAFE


@pytest.mark.parametrize("kwargs", [
    {"level": 5},
    {"level": 0},
    {"recording_duration_seconds": -1},
    {"prompt_text": "   "},
])
def test_invalid_submission_is_rejected_before_scoring(provider, clock, kwargs):
    scorer = ExplodingScorer()
    engine = engine_with(provider, clock, scorer)
    args = {"prompt_text": PROMPT, "transcript": ANSWER, "level": 1, "recording_duration_seconds": 35}
    args.update(kwargs)
    with pytest.raises(InvalidSubmission):
        engine.submit(**args)
    assert scorer.calls == 0


def test_invalid_submission_is_a_value_error(engine):
    with pytest.raises(ValueError):
        engine.submit(PROMPT, ANSWER, 9, 10)


def test_submit_payload_accepts_wire_keys(engine):
    result = engine.submit_payload({
        "promptText": PROMPT,
        "transcript": ANSWER,
        "level": 1,
        "recordingDurationSeconds": 35,
    })
    assert result.passed is True


def test_result_contract(engine):
    payload = engine.submit(PROMPT, ANSWER, 1, 35).to_dict()
    assert set(payload["subscores"]) == {"relevance", "grammar", "fluency", "pronunciation"}
    assert payload["analysisMethod"] == "primary"
    assert payload["enforcementReason"] is None
    assert payload["requiredThreshold"] == 50
    assert set(payload["feedback"]) == {"summary", "encouragement", "improvements", "strengths"}
    assert set(payload["feedback"]["summary"]) == {"en", "so"}
    assert payload["feedback"]["improvements"]
    assert payload["feedback"]["strengths"]
    assert payload["progression"]["currentLevelName"] == "BEGINNER"


def test_update_settings(engine):
    settings = engine.update_settings(min_relevance_threshold=60)
    assert settings.min_relevance_threshold == 60
    assert engine.submit(PROMPT, ANSWER, 1, 35).enforcement_reason == EnforcementReason.OFF_TOPIC

    with pytest.raises(ValueError):
        engine.update_settings(no_such_setting=1)


def test_progression_can_be_disabled(provider, clock):
    engine = EnforcementPolicyEngine(
        level_provider=provider, clock=clock,
        settings=EnforcementSettings(enable_progression_analytics=False),
    )
    assert engine.submit(PROMPT, ANSWER, 1, 35).progression is None


def test_system_status(engine):
    status = engine.system_status()
    assert status["settings"]["min_relevance_threshold"] == 30
    assert status["settings"]["scoring_timeout_seconds"] == 2.0
    assert status["levels"][4]["passThreshold"] == 80
    assert status["scoringEngine"] == "ScoringEngine"


def test_settings_from_config(config):
    config.min_relevance_threshold = 40
    settings = EnforcementSettings.from_config(config)
    assert settings.min_relevance_threshold == 40
    assert settings.subscore_floor == 20
