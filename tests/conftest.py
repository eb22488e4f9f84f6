from collections.abc import Mapping
import json
from pathlib import Path

import pytest

from mccfix.config import Settings
from mccfix.gateway import GatewayError
from mccfix.schemas import RemoteAccountState


class FakeRemote:
    def __init__(self) -> None:
        self.accounts: dict[str, str | None] = {}
        self.retrieve_errors: dict[str, Exception] = {}
        self.update_errors: dict[str, Exception] = {}
        self.calls: list[tuple[object, ...]] = []
        self.api_keys: list[str] = []

    def __call__(self, api_key: str) -> "FakeGateway":
        self.api_keys.append(api_key)
        return FakeGateway(self, api_key)

    def calls_named(self, name: str) -> list[tuple[object, ...]]:
        return [call for call in self.calls if call[0] == name]


class FakeGateway:
    def __init__(self, remote: FakeRemote, api_key: str) -> None:
        self.remote = remote
        self.api_key = api_key

    async def retrieve_account(self, account_id: str) -> RemoteAccountState:
        self.remote.calls.append(("retrieve", self.api_key, account_id))
        if account_id in self.remote.retrieve_errors:
            raise self.remote.retrieve_errors[account_id]
        if account_id not in self.remote.accounts:
            raise GatewayError(f"No such account: '{account_id}'")
        return RemoteAccountState(account_id=account_id, mcc=self.remote.accounts[account_id])

    async def update_account(
        self,
        account_id: str,
        *,
        mcc: str,
        metadata: Mapping[str, str],
    ) -> RemoteAccountState:
        self.remote.calls.append(("update", self.api_key, account_id, mcc, dict(metadata)))
        if account_id in self.remote.update_errors:
            raise self.remote.update_errors[account_id]
        self.remote.accounts[account_id] = mcc
        return RemoteAccountState(account_id=account_id, mcc=mcc, metadata=dict(metadata))


@pytest.fixture()
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture()
def temp_workspace(tmp_path: Path) -> Path:
    (tmp_path / "data").mkdir(parents=True, exist_ok=True)
    (tmp_path / "outputs").mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture()
def test_settings(temp_workspace: Path) -> Settings:
    return Settings(
        app_name="mccfix",
        log_level="INFO",
        api_keys_path=str(temp_workspace / "data" / "api-keys.json"),
        accounts_path=str(temp_workspace / "data" / "accounts.csv"),
        results_path=str(temp_workspace / "outputs" / "results.csv"),
        expected_mcc="7512",
        stripe_api_version="2022-08-01",
        fail_on_record_errors=False,
        schedule_hour_utc=2,
        schedule_minute_utc=0,
    )


@pytest.fixture()
def write_inputs(test_settings: Settings):
    def _write(api_keys: dict[str, str], rows: list[tuple[str, str]]) -> None:
        Path(test_settings.api_keys_path).write_text(json.dumps(api_keys), encoding="utf-8")
        lines = ["connectedAccountId,platformAccountId"]
        lines.extend(f"{connected},{platform}" for platform, connected in rows)
        Path(test_settings.accounts_path).write_text("\n".join(lines) + "\n", encoding="utf-8")

    return _write
