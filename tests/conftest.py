"""Shared test fixtures and factories."""

import asyncio
from pathlib import Path

import pytest

from ledgertodo.config.paths import ENV_VAR, get_home
from ledgertodo.ledger import AddressDeriver, InMemoryLedger
from ledgertodo.ledger.types import (
    Address,
    Confirmation,
    LedgerRequest,
    TodoRecord,
    UserProfile,
)
from ledgertodo.todos import TodoOrchestrator

OWNER = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
OTHER_OWNER = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"

# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def config_toml_content() -> str:
    """Valid TOML config content."""
    return f"""
owner = "{OWNER}"

[ledger]
program_id = "todoTest1111111111111111111111111111111111"
connect_timeout = 2.5

[logging]
level = "DEBUG"
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Point LEDGERTODO_HOME at a temp dir and keep cwd configs out of the way."""
    home = tmp_path / "home"
    monkeypatch.setenv(ENV_VAR, str(home))
    monkeypatch.delenv("LEDGERTODO_OWNER", raising=False)
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    monkeypatch.chdir(tmp_path)
    get_home.cache_clear()
    yield home
    get_home.cache_clear()


# =============================================================================
# Ledger Fixtures and Mocks
# =============================================================================


class RecordingLedger(InMemoryLedger):
    """InMemoryLedger that records every remote call.

    ``failures`` maps a method name to an exception raised instead of doing the
    call. ``latency`` yields to the event loop before each call so concurrent
    tasks interleave.
    """

    def __init__(self, deriver: AddressDeriver | None = None) -> None:
        super().__init__(deriver)
        self.calls: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.latency: float | None = None

    async def _enter(self, method: str) -> None:
        self.calls.append(method)
        if self.latency is not None:
            await asyncio.sleep(self.latency)
        if method in self.failures:
            raise self.failures[method]

    async def fetch_profile(self, owner: str) -> UserProfile | None:
        await self._enter("fetch_profile")
        return await super().fetch_profile(owner)

    async def fetch_todo(self, address: Address) -> TodoRecord | None:
        await self._enter("fetch_todo")
        return await super().fetch_todo(address)

    async def fetch_all_todos(self, owner: str) -> list[TodoRecord]:
        await self._enter("fetch_all_todos")
        return await super().fetch_all_todos(owner)

    async def latest_blockhash(self) -> str:
        await self._enter("latest_blockhash")
        return await super().latest_blockhash()

    async def submit(self, request: LedgerRequest) -> Confirmation:
        await self._enter("submit")
        return await super().submit(request)


class GatedLedger(RecordingLedger):
    """Holds every submission until ``release`` is set."""

    def __init__(self, deriver: AddressDeriver | None = None) -> None:
        super().__init__(deriver)
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def submit(self, request: LedgerRequest) -> Confirmation:
        self.entered.set()
        await self.release.wait()
        return await super().submit(request)


@pytest.fixture
def deriver() -> AddressDeriver:
    return AddressDeriver()


@pytest.fixture
def ledger(deriver: AddressDeriver) -> RecordingLedger:
    return RecordingLedger(deriver)


@pytest.fixture
def orchestrator(ledger: RecordingLedger, deriver: AddressDeriver) -> TodoOrchestrator:
    return TodoOrchestrator(OWNER, ledger, deriver)


# =============================================================================
# CLI Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
