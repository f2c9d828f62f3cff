"""
Registration and login boundary in front of the record store.

Credential format rules live here, not in the store: the store only guards
its own row format.
"""

import re

import structlog

from heartpi.adapters.record_store import RecordStore
from heartpi.domain.errors import InvalidCredentialsError, ValidationError
from heartpi.domain.models import ReadingSample

logger = structlog.get_logger(__name__)

PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Za-z])(?=.*\d).{5,}$")
PASSWORD_RULE = (
    "Password must be at least 5 characters long and contain at least one letter and one number."
)


def validate_password(password: str) -> None:
    if not PASSWORD_PATTERN.match(password):
        raise ValidationError(PASSWORD_RULE)


class AccountService:
    """Registers users, checks logins and reads back their history."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store
        self.logger = logger.bind(component="account_service")

    def register(self, username: str, password: str) -> str:
        """
        Create a credential row.

        Raises:
            ValidationError: empty fields or a password breaking the format rule.
            DuplicateUserError: the username is taken, ignoring case.
        """
        username, password = username.strip(), password.strip()
        if not username or not password:
            raise ValidationError("Both username and password must be filled")
        validate_password(password)

        row = self.store.add_credential(username, password)
        self.logger.info("user_registered", username=row.username)
        return row.username

    def login(self, username: str, password: str) -> str:
        """Return the username as registered, raise InvalidCredentialsError otherwise."""
        username, password = username.strip(), password.strip()
        if not username or not password or not self.store.verify(username, password):
            self.logger.info("login_failed", username=username)
            raise InvalidCredentialsError("Incorrect username or password")

        row = self.store.credential_for(username)
        self.logger.info("login_succeeded", username=username)
        return row.username if row else username

    def accounts(self) -> list[str]:
        return self.store.usernames()

    def history(self, username: str) -> list[ReadingSample]:
        return list(self.store.readings_for(username))
