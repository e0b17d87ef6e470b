"""
Attempt history for practice questions.
Stores one JSON line per assessed answer under the working directory.
"""
import json
import logging
import os
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import List, Optional

from ...config import ATTEMPT_LOG_FILENAME, HELP_AFTER_FAILED_ATTEMPTS

logger = logging.getLogger("attempt_log")


@dataclass
class AttemptRecord:
    """One assessed answer to one question."""
    user_id: str
    level_number: int
    question_id: str
    attempt_number: int
    transcript: str
    recording_duration_seconds: float
    score: int
    passed: bool
    analysis_method: str
    recorded_at: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))


class AttemptLog:
    """Append-only JSON-lines log of attempts."""

    def __init__(self, workdir: str = "./_hadal",
                 filename: str = ATTEMPT_LOG_FILENAME,
                 help_after_failed_attempts: int = HELP_AFTER_FAILED_ATTEMPTS):
        self.workdir = workdir
        self.path = os.path.join(workdir, filename)
        self.help_after_failed_attempts = help_after_failed_attempts
        self._lock = threading.Lock()
        os.makedirs(self.workdir, exist_ok=True)

    def append(self, record: AttemptRecord) -> bool:
        """
        Persist an attempt.

        Returns:
            True if the record was written
        """
        line = json.dumps(asdict(record), ensure_ascii=False)
        try:
            with self._lock, open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            logger.error(f"Failed to write attempt to {self.path}: {e}")
            return False
        logger.info(
            f"Logged attempt {record.attempt_number} for {record.user_id} "
            f"(level {record.level_number}, {record.question_id}): {record.score}"
        )
        return True

    def all_attempts(self) -> List[AttemptRecord]:
        if not os.path.exists(self.path):
            return []

        records = []
        with open(self.path, "r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(AttemptRecord(**json.loads(line)))
                except (ValueError, TypeError) as e:
                    logger.warning(f"Skipping malformed attempt on line {lineno}: {e}")
        return records

    def attempts_for(self, user_id: str, level_number: Optional[int] = None,
                     question_id: Optional[str] = None) -> List[AttemptRecord]:
        """Attempts by one user, optionally narrowed to a level and question."""
        return [
            r for r in self.all_attempts()
            if r.user_id == user_id
            and (level_number is None or r.level_number == level_number)
            and (question_id is None or r.question_id == question_id)
        ]

    def next_attempt_number(self, user_id: str, level_number: int, question_id: str) -> int:
        attempts = self.attempts_for(user_id, level_number, question_id)
        return max((r.attempt_number for r in attempts), default=0) + 1

    def failed_attempt_count(self, user_id: str, level_number: int, question_id: str) -> int:
        return sum(1 for r in self.attempts_for(user_id, level_number, question_id) if not r.passed)

    def needs_help(self, user_id: str, level_number: int, question_id: str) -> bool:
        """Whether the learner has failed this question often enough to be offered help."""
        return self.failed_attempt_count(user_id, level_number, question_id) >= self.help_after_failed_attempts
