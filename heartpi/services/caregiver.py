"""
Caregiver alerts built from a user's stored heart-rate history.

The alert risk label comes from the average stored heart rate, not from the
survey tier, so it reflects everything recorded for the user so far.
"""

from collections.abc import Iterable
from datetime import datetime

import structlog

from heartpi.adapters.mail import MailTransport
from heartpi.adapters.record_store import RecordStore
from heartpi.domain.errors import AlertDeliveryError, InvalidCredentialsError, ValidationError
from heartpi.domain.models import CaregiverAlert, ReadingSample
from heartpi.domain.result import Result

logger = structlog.get_logger(__name__)

DEFAULT_SUBJECT = "HeartPi Alert"


def risk_label_for_average(average_bpm: float | None) -> str:
    if average_bpm is None:
        return "Unknown"
    if average_bpm < 80:
        return "Low"
    if average_bpm < 100:
        return "Moderate"
    return "High"


def compose_alert(username: str, samples: Iterable[ReadingSample]) -> CaregiverAlert:
    samples = list(samples)
    average = latest = None
    last_timestamp = None
    if samples:
        average = sum(s.heart_rate for s in samples) / len(samples)
        latest = samples[-1].heart_rate
        last_timestamp = samples[-1].timestamp

    risk = risk_label_for_average(average)
    if risk == "High":
        subject = f"HIGH RISK DETECTED, PLEASE CHECK UP ON {username}'s HEART HEALTH IMMEDIATELY!"
    else:
        subject = DEFAULT_SUBJECT

    lines = [
        "Hi there!",
        "",
        f"{username} trusted you with their HeartPi data. Here are their recent readings:",
        "",
    ]
    if samples:
        last_reading = datetime.fromtimestamp(last_timestamp).strftime("%Y-%m-%d %H:%M:%S")
        lines += [
            f"Average Heart Rate: {average:.1f} BPM",
            f"Latest Heart Rate: {latest:.1f} BPM",
            f"Last Reading: {last_reading}",
            f"Risk Level: {risk}",
            "",
        ]
    else:
        lines += ["No heart rate data available.", ""]
    lines += [
        f"User {username} wanted to share this data with you because they trust you.",
        "",
        "Sent with love from HeartPi.",
    ]

    return CaregiverAlert(
        username=username,
        subject=subject,
        body="\n".join(lines),
        risk_label=risk,
        average_bpm=average,
        latest_bpm=latest,
        last_timestamp=last_timestamp,
    )


class CaregiverNotifier:
    """Authenticates the user, composes the alert and hands it to the mail transport."""

    def __init__(self, store: RecordStore, transport: MailTransport) -> None:
        self.store = store
        self.transport = transport
        self.logger = logger.bind(component="caregiver_notifier")

    def notify(
        self, username: str, password: str, recipient: str
    ) -> Result[CaregiverAlert, AlertDeliveryError]:
        """
        Send the user's alert to recipient.

        Bad input and wrong credentials raise; a transport failure is an
        expected outcome and comes back as an error Result.
        """
        username, password, recipient = username.strip(), password.strip(), recipient.strip()
        if not username or not password or not recipient:
            raise ValidationError("Account, password and recipient email are all required")
        if not self.store.verify(username, password):
            self.logger.info("caregiver_alert_auth_failed", username=username)
            raise InvalidCredentialsError("Invalid username or password")

        alert = compose_alert(username, self.store.readings_for(username))
        log = self.logger.bind(username=username, risk=alert.risk_label)

        if not self.transport.send(recipient, alert.subject, alert.body):
            log.error("caregiver_alert_not_sent", recipient=recipient)
            return Result.err(AlertDeliveryError(f"Failed to send the alert email to {recipient}"))

        log.info("caregiver_alert_sent", recipient=recipient)
        return Result.ok(alert)
