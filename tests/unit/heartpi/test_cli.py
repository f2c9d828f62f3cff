"""
Tests for the console front end, driven through click's CliRunner with an
in-memory record store and a fake mail transport.
"""

import random
from collections.abc import Iterator

import pytest
from click.testing import CliRunner

from heartpi.adapters.record_store import InMemoryRecordStore
from heartpi.cli import main
from heartpi.config import AppConfig, reset_config_cache
from heartpi.services.heartpi import HeartPiService
from heartpi.services.simulator import ReadingSimulator


class FakeTransport:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def send(self, recipient: str, subject: str, body: str) -> bool:
        self.sent.append((recipient, subject, body))
        return True


@pytest.fixture(autouse=True)
def quiet_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("HEARTPI_ENABLE_ERROR_LOG", "false")
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    monkeypatch.setenv("ENVIRONMENT", "development")
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def obj(store: InMemoryRecordStore, transport: FakeTransport) -> dict:
    service = HeartPiService(
        store,
        config=AppConfig(),
        simulator=ReadingSimulator(random.Random(11)),
        transport=transport,
    )
    return {"service": service}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _register(runner: CliRunner, obj: dict, username: str = "alice") -> None:
    result = runner.invoke(main, ["register", username, "--password", "abc123"], obj=obj)
    assert result.exit_code == 0, result.output


SURVEY_ARGS = [
    "--password",
    "abc123",
    "--age-group",
    "6",
    "--gender",
    "male",
    "--sleep",
    "1",
    "--exercise",
    "1",
    "--diet",
    "4",
    "--smoker",
    "--family",
    "heart_disease,diabetes",
]


def test_register_and_login(runner: CliRunner, obj: dict) -> None:
    _register(runner, obj)

    result = runner.invoke(main, ["login", "ALICE", "--password", "abc123"], obj=obj)

    assert result.exit_code == 0
    assert "Welcome back, alice!" in result.output


def test_register_prompts_for_password(runner: CliRunner, obj: dict) -> None:
    result = runner.invoke(main, ["register", "bob"], input="bob123\nbob123\n", obj=obj)

    assert result.exit_code == 0
    assert "Registered bob" in result.output


def test_duplicate_registration_fails(runner: CliRunner, obj: dict) -> None:
    _register(runner, obj)

    result = runner.invoke(main, ["register", "Alice", "--password", "xyz789"], obj=obj)

    assert result.exit_code == 1
    assert "Username already exists" in result.output


def test_weak_password_fails(runner: CliRunner, obj: dict) -> None:
    result = runner.invoke(main, ["register", "alice", "--password", "abcdef"], obj=obj)

    assert result.exit_code == 1
    assert "at least 5 characters" in result.output


def test_login_with_wrong_password(runner: CliRunner, obj: dict) -> None:
    _register(runner, obj)

    result = runner.invoke(main, ["login", "alice", "--password", "nope99"], obj=obj)

    assert result.exit_code == 1
    assert "Incorrect username or password" in result.output


def test_survey_scores_and_saves_readings(
    runner: CliRunner, obj: dict, store: InMemoryRecordStore
) -> None:
    _register(runner, obj)

    result = runner.invoke(main, ["survey", "alice", *SURVEY_ARGS], obj=obj)

    assert result.exit_code == 0, result.output
    # 3+3+3+3 + 2+1 + 3 + 3
    assert "Risk score 21" in result.output
    assert "High risk of heart disease." in result.output
    assert "Saved 20 heart-rate readings for alice." in result.output
    with store:
        assert len(list(store.readings_for("alice"))) == 20


def test_survey_requires_login(runner: CliRunner, obj: dict, store: InMemoryRecordStore) -> None:
    result = runner.invoke(main, ["survey", "ghost", *SURVEY_ARGS], obj=obj)

    assert result.exit_code == 1
    with store:
        assert store.row_count() == 0


def test_history_lists_readings(runner: CliRunner, obj: dict) -> None:
    _register(runner, obj)
    runner.invoke(main, ["survey", "alice", *SURVEY_ARGS], obj=obj)

    result = runner.invoke(main, ["history", "alice", "--password", "abc123"], obj=obj)

    assert result.exit_code == 0
    assert "Heart-rate history for alice" in result.output


def test_history_when_empty(runner: CliRunner, obj: dict) -> None:
    _register(runner, obj)

    result = runner.invoke(main, ["history", "alice", "--password", "abc123"], obj=obj)

    assert "No readings stored for alice." in result.output


def test_accounts(runner: CliRunner, obj: dict) -> None:
    result = runner.invoke(main, ["accounts"], obj=obj)
    assert "No accounts registered yet." in result.output

    _register(runner, obj, "carol")
    _register(runner, obj, "dave")

    result = runner.invoke(main, ["accounts"], obj=obj)
    assert result.output.split() == ["carol", "dave"]


def test_notify_sends_through_transport(
    runner: CliRunner, obj: dict, transport: FakeTransport
) -> None:
    _register(runner, obj)

    result = runner.invoke(
        main, ["notify", "alice", "care@example.com", "--password", "abc123"], obj=obj
    )

    assert result.exit_code == 0, result.output
    assert "Alert sent to care@example.com" in result.output
    assert "risk: Unknown" in result.output
    assert [recipient for recipient, _, _ in transport.sent] == ["care@example.com"]


def test_survey_prompts_for_family_history(
    runner: CliRunner, obj: dict, store: InMemoryRecordStore
) -> None:
    _register(runner, obj)
    args = [arg for arg in SURVEY_ARGS if arg not in ("--family", "heart_disease,diabetes")]

    result = runner.invoke(
        main, ["survey", "alice", *args], input="Heart_Disease, diabetes\n", obj=obj
    )

    assert result.exit_code == 0, result.output
    assert "Conditions in your family" in result.output
    assert "Risk score 21" in result.output


def test_survey_family_history_defaults_to_none(runner: CliRunner, obj: dict) -> None:
    _register(runner, obj)
    args = [arg for arg in SURVEY_ARGS if arg not in ("--family", "heart_disease,diabetes")]

    result = runner.invoke(main, ["survey", "alice", *args], input="\n", obj=obj)

    assert result.exit_code == 0, result.output
    # 3+3+3+3 + 0 + 3 + 3
    assert "Risk score 18" in result.output


def test_survey_rejects_unknown_family_condition(
    runner: CliRunner, obj: dict, store: InMemoryRecordStore
) -> None:
    _register(runner, obj)
    args = [*SURVEY_ARGS[:-1], "diabetes,asthma"]

    result = runner.invoke(main, ["survey", "alice", *args], obj=obj)

    assert result.exit_code == 2
    assert "unknown condition asthma" in result.output
    with store:
        assert list(store.readings_for("alice")) == []
