"""
Assessment orchestration: score a survey, simulate readings, persist history.

The assessment itself never depends on storage. If persisting the heart-rate
rows fails, the caller still gets the tier and readings together with a
failed Result describing the storage problem.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import structlog

from heartpi.adapters.record_store import RecordStore, check_field
from heartpi.adapters.vitals_log import VitalsLog
from heartpi.config import AssessmentConfig
from heartpi.domain.errors import StorageIOError, ValidationError
from heartpi.domain.models import Assessment, SurveyAnswers
from heartpi.domain.result import Result
from heartpi.services import risk_scorer
from heartpi.services.simulator import ReadingSimulator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Submission:
    """An assessment plus the outcome of writing its heart-rate rows."""

    assessment: Assessment
    persisted: Result[int, StorageIOError]
    timestamp: int

    @property
    def message(self) -> str:
        return self.assessment.message


class AssessmentService:
    """
    Answers survey submissions.

    Sole writer of the reading rows produced by a submission: one row for the
    simulated heart rate at submission time, then follow-up rows one second
    apart scattered around it.
    """

    def __init__(
        self,
        store: RecordStore,
        simulator: ReadingSimulator | None = None,
        config: AssessmentConfig | None = None,
        vitals_log: VitalsLog | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.simulator = simulator or ReadingSimulator()
        self.config = config or AssessmentConfig()
        self.vitals_log = vitals_log
        self.clock = clock
        self.logger = logger.bind(component="assessment_service")

    def assess(self, answers: SurveyAnswers) -> Assessment:
        """Score and simulate without touching storage."""
        risk_score, risk_tier = risk_scorer.assess_risk(answers)
        readings = self.simulator.simulate(risk_tier)
        self.logger.info("survey_assessed", score=risk_score, tier=risk_tier.value)
        return Assessment(score=risk_score, tier=risk_tier, readings=readings)

    def submit(self, username: str, answers: SurveyAnswers) -> Submission:
        """
        Assess and store the heart-rate rows under username.

        The username is checked before scoring, so a ValidationError means
        nothing was assessed or written.
        """
        if not username:
            raise ValidationError("username must not be empty")
        check_field("username", username)

        assessment = self.assess(answers)
        now = int(self.clock())
        persisted = self._persist(username, assessment, now)
        return Submission(assessment=assessment, persisted=persisted, timestamp=now)

    def _persist(
        self, username: str, assessment: Assessment, now: int
    ) -> Result[int, StorageIOError]:
        log = self.logger.bind(username=username)
        heart_rate = assessment.readings.heart_rate
        follow_ups = self.simulator.follow_up_heart_rates(
            heart_rate,
            self.config.follow_up_samples,
            self.config.follow_up_jitter_bpm,
        )

        written = 0
        try:
            self.store.add_reading(username, now, heart_rate)
            written += 1
            for offset, bpm in enumerate(follow_ups, start=1):
                self.store.add_reading(username, now + offset, bpm)
                written += 1

            if self.vitals_log is not None:
                self.vitals_log.record(assessment.readings, datetime.fromtimestamp(now))
        except StorageIOError as e:
            log.error("submission_persist_failed", error=str(e), rows_written=written)
            return Result.err(e)

        log.info("submission_persisted", rows_written=written, tier=assessment.tier.value)
        return Result.ok(written)
