"""
Service facade used by a presentation layer.

Wires the record store, vitals log, simulator and mail transport together
from AppConfig, and owns the store lifecycle:

    service = HeartPiService.from_config(get_config())
    with service.session():
        service.register("alice", "abc123")
        submission = service.submit("alice", answers)
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from heartpi.adapters.mail import MailTransport, SmtpMailTransport
from heartpi.adapters.record_store import CsvRecordStore, FlatRecordStore
from heartpi.adapters.vitals_log import VitalsLog
from heartpi.config import AppConfig, get_config
from heartpi.domain.errors import AlertDeliveryError
from heartpi.domain.models import Assessment, CaregiverAlert, ReadingSample, RiskTier, SurveyAnswers
from heartpi.domain.result import Result
from heartpi.services.accounts import AccountService
from heartpi.services.assessment import AssessmentService, Submission
from heartpi.services.caregiver import CaregiverNotifier
from heartpi.services.simulator import ReadingSimulator
from heartpi.services.tips import Tip, tips_for

logger = structlog.get_logger(__name__)


class HeartPiService:
    """
    Main entry point combining:
    - Account registration and login
    - Survey assessment with persisted heart-rate history
    - Caregiver alerts
    - Lifestyle tips
    """

    def __init__(
        self,
        store: FlatRecordStore,
        config: AppConfig | None = None,
        simulator: ReadingSimulator | None = None,
        transport: MailTransport | None = None,
        vitals_log: VitalsLog | None = None,
    ) -> None:
        self.config = config or get_config()
        self.store = store
        self.logger = logger.bind(component="heartpi_service")

        self.accounts_service = AccountService(store)
        self.assessment_service = AssessmentService(
            store,
            simulator=simulator,
            config=self.config.assessment,
            vitals_log=vitals_log,
        )
        self.notifier = CaregiverNotifier(store, transport or SmtpMailTransport(self.config.mail))

    @classmethod
    def from_config(cls, config: AppConfig | None = None) -> "HeartPiService":
        config = config or get_config()
        vitals_log = None
        if config.storage.enable_vitals_log:
            vitals_log = VitalsLog(config.storage.vitals_log_path)
        return cls(
            CsvRecordStore(config.storage.record_store_path),
            config=config,
            vitals_log=vitals_log,
        )

    @contextmanager
    def session(self) -> Iterator["HeartPiService"]:
        """Open the record store for the duration of the block."""
        self.store.open()
        self.logger.info("heartpi_session_started")
        try:
            yield self
        finally:
            self.store.close()
            self.logger.info("heartpi_session_ended")

    def register(self, username: str, password: str) -> str:
        return self.accounts_service.register(username, password)

    def login(self, username: str, password: str) -> str:
        return self.accounts_service.login(username, password)

    def accounts(self) -> list[str]:
        return self.accounts_service.accounts()

    def history(self, username: str) -> list[ReadingSample]:
        return self.accounts_service.history(username)

    def assess(self, answers: SurveyAnswers) -> tuple[str, float, float, float, float, float]:
        """Presentation contract: (message, heart rate, systolic, diastolic, cholesterol, ecg)."""
        return self.assessment_service.assess(answers).as_display_tuple()

    def evaluate(self, answers: SurveyAnswers) -> Assessment:
        return self.assessment_service.assess(answers)

    def submit(self, username: str, answers: SurveyAnswers) -> Submission:
        return self.assessment_service.submit(username, answers)

    def tips(self, risk_tier: RiskTier) -> list[Tip]:
        return tips_for(risk_tier)

    def notify_caregiver(
        self, username: str, password: str, recipient: str
    ) -> Result[CaregiverAlert, AlertDeliveryError]:
        return self.notifier.notify(username, password, recipient)
