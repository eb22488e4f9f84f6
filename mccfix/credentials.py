from collections.abc import Iterator, Mapping
import json
from pathlib import Path
from types import MappingProxyType


class CredentialTable(Mapping[str, str]):
    def __init__(self, secrets: Mapping[str, str]) -> None:
        self._secrets = MappingProxyType(dict(secrets))

    def __getitem__(self, tenant_id: str) -> str:
        return self._secrets[tenant_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._secrets)

    def __len__(self) -> int:
        return len(self._secrets)

    def resolve(self, tenant_id: str) -> str | None:
        # Empty secrets are treated the same as a missing entry.
        return self._secrets.get(tenant_id) or None


def load_credentials(path: Path) -> CredentialTable:
    if not path.exists():
        raise FileNotFoundError(f"credential file not found: {path}")

    with path.open("r", encoding="utf-8") as infile:
        payload = json.load(infile)

    if not isinstance(payload, dict):
        raise ValueError(f"credential file must contain a JSON object: {path}")

    for tenant_id, secret in payload.items():
        if not isinstance(secret, str):
            raise ValueError(f"credential for '{tenant_id}' must be a string")

    return CredentialTable(payload)
