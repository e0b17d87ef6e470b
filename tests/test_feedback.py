from hadal.assessment import (
    EnforcementReason,
    FeedbackContext,
    FeedbackGenerator,
    FeedbackMessages,
    LocalizedString,
    Subscores,
    build_progression,
)


def context(**overrides):
    values = dict(
        passed=True,
        overall_score=73,
        required_threshold=50,
        relevance=50,
        subscores=Subscores(50, 100, 70, 85),
        level_number=1,
        transcript_length=40,
    )
    values.update(overrides)
    return FeedbackContext(**values)


def test_passed_feedback_is_bilingual_and_complete():
    feedback = FeedbackGenerator().generate(context())
    assert "73%" in feedback.summary.en
    assert feedback.summary.so.startswith("Waad baastay")
    assert feedback.improvements
    assert feedback.strengths
    for item in feedback.improvements + feedback.strengths:
        assert item.en and item.so


def test_failed_feedback_mentions_threshold():
    feedback = FeedbackGenerator().generate(context(passed=False, overall_score=45, required_threshold=60))
    assert "60%" in feedback.summary.en
    assert FeedbackMessages.reach_threshold(60) in feedback.improvements


def test_off_topic_feedback():
    feedback = FeedbackGenerator().generate(context(
        passed=False, overall_score=0, relevance=10,
        subscores=Subscores(10, 80, 60, 70),
        enforcement_reason=EnforcementReason.OFF_TOPIC,
    ))
    assert "10%" in feedback.summary.en
    assert "su'aalka" in feedback.summary.so
    assert FeedbackMessages.IMPROVEMENTS["relevance"] in feedback.improvements
    assert FeedbackMessages.stay_on_topic() in feedback.improvements


def test_low_subscores_and_short_answers_drive_improvements():
    feedback = FeedbackGenerator().generate(context(
        passed=False, overall_score=30, subscores=Subscores(40, 45, 30, 20), transcript_length=12,
    ))
    for name in ("relevance", "grammar", "fluency", "pronunciation"):
        assert FeedbackMessages.IMPROVEMENTS[name] in feedback.improvements
    assert FeedbackMessages.short_answer() in feedback.improvements
    assert feedback.strengths == (FeedbackMessages.completed_recording(),)


def test_high_scores_drive_strengths():
    feedback = FeedbackGenerator().generate(context(
        overall_score=90, subscores=Subscores(90, 90, 90, 90), transcript_length=120,
    ))
    assert FeedbackMessages.outstanding_score() in feedback.strengths
    assert FeedbackMessages.detailed_answer() in feedback.strengths
    assert feedback.improvements == (FeedbackMessages.advanced_vocabulary(),)


def test_encouragement_bands():
    bands = [FeedbackMessages.encouragement(score).en for score in (95, 80, 79, 60, 59, 40, 39, 0)]
    assert bands[0] == bands[1]
    assert bands[1] != bands[2]
    assert bands[2] == bands[3]
    assert bands[3] != bands[4]
    assert bands[4] == bands[5]
    assert bands[5] != bands[6]
    assert bands[6] == bands[7]


def test_no_answer_and_failsafe_feedback():
    generator = FeedbackGenerator()
    assert generator.no_answer().strengths == ()
    assert generator.failsafe().strengths == ()
    assert generator.failsafe().improvements == (FeedbackMessages.retry_recording(),)
    assert generator.failsafe().summary.en == "A system error occurred. Please try again."


def test_render_uses_locale():
    feedback = FeedbackGenerator().generate(context())
    assert feedback.summary.so in feedback.render("so")
    assert feedback.summary.en in feedback.render("en")
    assert LocalizedString("a", "b").get("en") == "a"


def test_progression_to_next_level(provider):
    progression = build_progression(provider, 2, 45, 60, Subscores(80, 65, 50, 75))
    assert progression.current_level_name == "ELEMENTARY"
    assert progression.next_level == 3
    assert progression.next_level_name == "INTERMEDIATE"
    assert progression.progress_percentage == 75
    assert progression.areas_for_improvement == ("grammar", "fluency")
    assert progression.score_gap == 25
    assert progression.estimated_attempts == 3


def test_progression_when_already_above_next_threshold(provider):
    progression = build_progression(provider, 1, 73, 50, Subscores(50, 100, 70, 85))
    assert progression.progress_percentage == 146
    assert progression.score_gap == 0
    assert progression.estimated_attempts == 0
    assert progression.areas_for_improvement == ("relevance",)


def test_progression_at_top_level(provider):
    progression = build_progression(provider, 4, 85, 80, Subscores(90, 90, 90, 90))
    assert progression.next_level is None
    assert progression.next_level_name is None
    assert progression.score_gap is None
    assert progression.estimated_attempts is None
    assert progression.to_dict()["nextLevel"] is None
