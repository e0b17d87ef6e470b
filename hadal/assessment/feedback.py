"""
Localized feedback templates and generation.

This module contains all learner-facing feedback texts in English and Somali,
keeping them separate from the scoring and enforcement logic for easier
maintenance and translation.
"""
from typing import List

from .models import EnforcementReason, Feedback, FeedbackContext, LocalizedString


def _text(en: str, so: str) -> LocalizedString:
    return LocalizedString(en=en, so=so)


class FeedbackMessages:
    """Collection of all feedback templates."""

    @staticmethod
    def passed_summary(level: int, score: int, threshold: int) -> LocalizedString:
        return _text(
            f"You passed level {level} with {score}% (required {threshold}%).",
            f"Waad baastay! Heerka {level} - {score}% (loo baahan yahay {threshold}%).",
        )

    @staticmethod
    def failed_summary(level: int, score: int, threshold: int) -> LocalizedString:
        return _text(
            f"Level {level} not passed yet: {score}% of the required {threshold}%.",
            f"Waad dhacday. Heerka {level} - {score}%, loo baahan yahay {threshold}%.",
        )

    @staticmethod
    def off_topic_summary(relevance: int, min_relevance: int) -> LocalizedString:
        return _text(
            f"Your answer does not address the question (relevance {relevance}%, "
            f"at least {min_relevance}% needed).",
            f"Jawaabku ma khuseeyo su'aalka! La xidhiidh: {relevance}%, "
            f"loo baahan yahay {min_relevance}%+.",
        )

    @staticmethod
    def no_answer_summary() -> LocalizedString:
        return _text(
            "You did not say anything. Restart the recording and answer the question.",
            "Wax ma aadan hadlin. Rikoordka dib u bilow oo su'aasha ka jawaab.",
        )

    @staticmethod
    def failsafe_summary() -> LocalizedString:
        return _text(
            "A system error occurred. Please try again.",
            "Khalad nidaam ah ayaa dhacay. Fadlan isku day mar kale.",
        )

    @staticmethod
    def encouragement(score: int) -> LocalizedString:
        """Encouragement banded on the overall score."""
        if score >= 80:
            return _text(
                "Excellent! You are becoming a confident English speaker!",
                "Aad bay u fiican tahay! Waxaad noqon doontaa qof Ingiriis si fiican u hadla!",
            )
        if score >= 60:
            return _text(
                "Good work! Keep practicing, you are close to success!",
                "Waa hagaag! Sii wad dhaqanka, waxaad ku dhow dahay guul!",
            )
        if score >= 40:
            return _text(
                "Don't give up! Every practice session helps. Keep going!",
                "Ha niyad jabin! Dhaqan walba wuu ku dheeraynayaa. Sii wad!",
            )
        return _text(
            "Everyone starts somewhere. You can do it! Try again.",
            "Qof walba wuu bilowdaa meel. Adna waad awoodaa! Ku celi oo dhaqso!",
        )

    @staticmethod
    def no_answer_encouragement() -> LocalizedString:
        return _text(
            "Take a breath and speak when you are ready.",
            "Neef qaado oo hadal markaad diyaar tahay.",
        )

    @staticmethod
    def failsafe_encouragement() -> LocalizedString:
        return _text(
            "Your answer was not lost because of anything you did. Record it again.",
            "Khaladku adiga kaama iman. Mar kale jawaabta duub.",
        )

    @staticmethod
    def retry_recording() -> LocalizedString:
        return _text(
            "Press record and give the same answer again.",
            "Riix duubista oo isla jawaabta mar kale bixi.",
        )

    # Improvement tips, keyed by subscore
    IMPROVEMENTS = {
        "relevance": _text(
            "Answer the question directly; read it again before you start.",
            "Su'aasha si fiican uga jawaab; akhri su'aasha intaadan bilaabin.",
        ),
        "grammar": _text(
            "Use complete sentences with a subject and a verb.",
            "Jumlado dhammaystiran isticmaal oo naxwaha hagaaji.",
        ),
        "fluency": _text(
            "Speak in longer, connected sentences using words like 'and' or 'because'.",
            "Jumlado dhaadheer oo isku xidhan ku hadal, sida 'and' iyo 'because'.",
        ),
        "pronunciation": _text(
            "Use the full recording time and speak clearly without hesitating.",
            "Waqtiga rikoordka oo dhan isticmaal oo si cad u hadal adigoon kala joogsan.",
        ),
    }

    # Strengths, keyed by subscore
    STRENGTHS = {
        "relevance": _text(
            "Your answer stays on topic.",
            "Jawaabkaagu waa ku habboon yahay su'aasha.",
        ),
        "grammar": _text(
            "Your sentences are well formed.",
            "Naxwahaagu waa fiican yahay.",
        ),
        "fluency": _text(
            "You speak with good flow.",
            "Si habsami leh ayaad u hadashaa.",
        ),
        "pronunciation": _text(
            "Good pacing and clear delivery.",
            "Dhawaqaagu waa cad yahay, xawaarahaaguna waa wanaagsan yahay.",
        ),
    }

    @staticmethod
    def short_answer() -> LocalizedString:
        return _text(
            "Give a longer answer with more detail.",
            "Jawaab dheer oo faahfaahsan bixi.",
        )

    @staticmethod
    def stay_on_topic() -> LocalizedString:
        return _text(
            "Think about what the question asks, then answer that directly.",
            "Kaga fekir waxa laga doonayo, kadibna si toos ah ugu jawaab.",
        )

    @staticmethod
    def reach_threshold(threshold: int) -> LocalizedString:
        return _text(
            f"Reach {threshold}% to pass this level.",
            f"Si aad u baasto, gaadh {threshold}%.",
        )

    @staticmethod
    def add_detail() -> LocalizedString:
        return _text(
            "Add examples and detail to make your answer stronger.",
            "Tusaalooyin iyo faahfaahin ku dar si jawaabtaadu u xoogaysato.",
        )

    @staticmethod
    def advanced_vocabulary() -> LocalizedString:
        return _text(
            "Challenge yourself with more varied vocabulary.",
            "Isku day erayo kala duwan oo heer sare ah.",
        )

    @staticmethod
    def detailed_answer() -> LocalizedString:
        return _text(
            "You gave a detailed answer.",
            "Jawaab faahfaahsan ayaad bixisay.",
        )

    @staticmethod
    def outstanding_score() -> LocalizedString:
        return _text(
            "Outstanding overall performance.",
            "Natiijo aad u sareysa.",
        )

    @staticmethod
    def solid_score() -> LocalizedString:
        return _text(
            "Solid overall performance.",
            "Natiijo wanaagsan.",
        )

    @staticmethod
    def completed_recording() -> LocalizedString:
        return _text(
            "You completed the recording, and that is the first step.",
            "Waad dhammaysay rikoordka, taasi waa tallaabada koowaad.",
        )


class FeedbackGenerator:
    """Maps an assessment outcome to structured, bilingual feedback."""

    SHORT_ANSWER_CHARS = 30
    DETAILED_ANSWER_CHARS = 50
    LOW_SUBSCORE = 50
    HIGH_SUBSCORE = 70

    def __init__(self, messages: FeedbackMessages = None):
        self.messages = messages or FeedbackMessages()

    def generate(self, context: FeedbackContext) -> Feedback:
        """
        Build feedback for a scored answer.

        Args:
            context: Outcome of enforcement plus the subscores it was based on

        Returns:
            Feedback with non-empty improvements and strengths
        """
        if context.enforcement_reason == EnforcementReason.OFF_TOPIC:
            summary = self.messages.off_topic_summary(context.relevance, context.min_relevance_threshold)
        elif context.passed:
            summary = self.messages.passed_summary(
                context.level_number, context.overall_score, context.required_threshold
            )
        else:
            summary = self.messages.failed_summary(
                context.level_number, context.overall_score, context.required_threshold
            )

        return Feedback(
            summary=summary,
            encouragement=self.messages.encouragement(context.overall_score),
            improvements=tuple(self._improvements(context)),
            strengths=tuple(self._strengths(context)),
        )

    def no_answer(self) -> Feedback:
        return Feedback(
            summary=self.messages.no_answer_summary(),
            encouragement=self.messages.no_answer_encouragement(),
            improvements=(self.messages.short_answer(),),
        )

    def failsafe(self) -> Feedback:
        return Feedback(
            summary=self.messages.failsafe_summary(),
            encouragement=self.messages.failsafe_encouragement(),
            improvements=(self.messages.retry_recording(),),
        )

    def _improvements(self, context: FeedbackContext) -> List[LocalizedString]:
        items = []
        for name, score in context.subscores.to_dict().items():
            if score < self.LOW_SUBSCORE:
                items.append(self.messages.IMPROVEMENTS[name])

        if context.transcript_length < self.SHORT_ANSWER_CHARS:
            items.append(self.messages.short_answer())

        if context.enforcement_reason == EnforcementReason.OFF_TOPIC:
            items.append(self.messages.stay_on_topic())
        elif not context.passed:
            items.append(self.messages.reach_threshold(context.required_threshold))

        if not items:
            if context.overall_score < 85:
                items.append(self.messages.add_detail())
            else:
                items.append(self.messages.advanced_vocabulary())
        return items

    def _strengths(self, context: FeedbackContext) -> List[LocalizedString]:
        items = []
        for name, score in context.subscores.to_dict().items():
            if score >= self.HIGH_SUBSCORE:
                items.append(self.messages.STRENGTHS[name])

        if context.transcript_length > self.DETAILED_ANSWER_CHARS:
            items.append(self.messages.detailed_answer())

        if context.overall_score >= 85:
            items.append(self.messages.outstanding_score())
        elif context.overall_score >= 70:
            items.append(self.messages.solid_score())

        if not items:
            items.append(self.messages.completed_recording())
        return items
