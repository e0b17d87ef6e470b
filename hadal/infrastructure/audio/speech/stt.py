"""
Live speech-to-text using Google Cloud Speech streaming recognition.

Recognition runs on a background thread. Interim and final results, and a
terminal error if the stream cannot be kept alive, are queued for the
session controller to drain on its own loop.
"""
import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from google.auth.exceptions import DefaultCredentialsError
from google.cloud import speech
from google.oauth2 import service_account

from ....assessment.errors import TranscriptionUnavailable
from ....config import (
    LANGUAGE_CODE, SAMPLE_RATE_TARGET,
    TRANSCRIPTION_MAX_RESTARTS, TRANSCRIPTION_RESTART_BACKOFF_SECONDS
)
from ....recording.interfaces import (
    CaptureHandle, DrainItem, Transcriber, TranscriptionSubscription, TranscriptSegment
)

logger = logging.getLogger("speech_stt")

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


@dataclass(frozen=True)
class RestartPolicy:
    """How often a dropped recognition stream is reopened."""
    max_restarts: int = TRANSCRIPTION_MAX_RESTARTS
    backoff_seconds: float = TRANSCRIPTION_RESTART_BACKOFF_SECONDS

    def delay_for(self, attempt: int) -> float:
        """Linear backoff: attempt 1 waits one backoff step."""
        return self.backoff_seconds * attempt


class GoogleStreamSubscription(TranscriptionSubscription):
    """One streaming recognition, restarted on failure under a RestartPolicy."""

    def __init__(self,
                 client,
                 streaming_config,
                 audio_source: CaptureHandle,
                 restart_policy: RestartPolicy,
                 sleep: Callable[[float], None] = time.sleep):
        self._client = client
        self._streaming_config = streaming_config
        self._audio_source = audio_source
        self._restart_policy = restart_policy
        self._sleep = sleep
        self._queue: "queue.Queue[DrainItem]" = queue.Queue()
        self._closed = threading.Event()
        self._thread = threading.Thread(target=self._run, name="speech-stream", daemon=True)
        self.restarts = 0

    def start(self) -> "GoogleStreamSubscription":
        self._thread.start()
        return self

    def _requests(self):
        for chunk in self._audio_source.chunks():
            if self._closed.is_set():
                return
            yield speech.StreamingRecognizeRequest(audio_content=chunk)

    def _run(self) -> None:
        while not self._closed.is_set():
            try:
                responses = self._client.streaming_recognize(
                    config=self._streaming_config, requests=self._requests()
                )
                for response in responses:
                    if self._closed.is_set():
                        return
                    self._queue_results(response)
            except Exception as e:
                if self._closed.is_set():
                    return
                if self.restarts >= self._restart_policy.max_restarts:
                    logger.error(f"Speech stream failed after {self.restarts} restarts: {e}")
                    self._queue.put(TranscriptionUnavailable(f"Live transcription lost: {e}"))
                    return
                self.restarts += 1
                delay = self._restart_policy.delay_for(self.restarts)
                logger.warning(
                    f"Speech stream error ({e}), restart {self.restarts}/"
                    f"{self._restart_policy.max_restarts} in {delay:.1f}s"
                )
                self._sleep(delay)
                continue

            # a stream that ends on its own after the audio ran out is done
            if self._audio_source.released:
                logger.debug("Speech stream finished")
                return
            if self.restarts >= self._restart_policy.max_restarts:
                self._queue.put(TranscriptionUnavailable("Live transcription ended unexpectedly"))
                return
            self.restarts += 1
            logger.info(f"Speech stream ended early, reopening ({self.restarts})")

    def _queue_results(self, response) -> None:
        for result in response.results:
            if not result.alternatives:
                continue
            alternative = result.alternatives[0]
            self._queue.put(TranscriptSegment(
                text=alternative.transcript,
                is_final=bool(result.is_final),
                confidence=alternative.confidence if result.is_final else None,
            ))

    def drain(self) -> List[DrainItem]:
        items = []
        while True:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                return items

    def finish(self, timeout: float) -> None:
        """Wait for the final results once the audio source has been released."""
        if self._thread.is_alive():
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning(f"Speech stream did not finish within {timeout:.1f}s")

    def close(self) -> None:
        self._closed.set()


class GoogleLiveTranscriber(Transcriber):
    """Opens streaming recognition sessions against Google Cloud Speech."""

    def __init__(self,
                 language_code: str = LANGUAGE_CODE,
                 sample_rate: int = SAMPLE_RATE_TARGET,
                 restart_policy: Optional[RestartPolicy] = None,
                 project_id: Optional[str] = None,
                 credentials_json: Optional[str] = None,
                 client=None):
        self.language_code = language_code
        self.sample_rate = sample_rate
        self.restart_policy = restart_policy or RestartPolicy()
        self.project_id = project_id
        self.credentials_json = credentials_json
        self._client = client

    def _get_client(self):
        if self._client is None:
            try:
                credentials = None
                if self.credentials_json:
                    credentials = service_account.Credentials.from_service_account_file(
                        self.credentials_json, scopes=[CLOUD_PLATFORM_SCOPE]
                    )
                # quota is charged to the configured project
                client_options = {"quota_project_id": self.project_id} if self.project_id else None
                self._client = speech.SpeechClient(credentials=credentials, client_options=client_options)
            except DefaultCredentialsError as e:
                raise TranscriptionUnavailable(f"Google Cloud credentials not found: {e}")
            except (OSError, ValueError) as e:
                raise TranscriptionUnavailable(f"Cannot load credentials from {self.credentials_json}: {e}")
        return self._client

    def streaming_config(self) -> speech.StreamingRecognitionConfig:
        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=self.sample_rate,
            language_code=self.language_code,
            enable_automatic_punctuation=True,
        )
        return speech.StreamingRecognitionConfig(config=config, interim_results=True)

    def open(self, audio_source: CaptureHandle) -> GoogleStreamSubscription:
        client = self._get_client()
        logger.info(f"Opening live transcription ({self.language_code}, {self.sample_rate} Hz)")
        return GoogleStreamSubscription(
            client, self.streaming_config(), audio_source, self.restart_policy
        ).start()
