"""Live speech-to-text."""

from .stt import GoogleLiveTranscriber, GoogleStreamSubscription, RestartPolicy

__all__ = ["GoogleLiveTranscriber", "GoogleStreamSubscription", "RestartPolicy"]
