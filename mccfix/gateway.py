from collections.abc import Callable, Mapping
from typing import Any, Protocol

import stripe

from mccfix.schemas import RemoteAccountState


class GatewayError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AccountGateway(Protocol):
    async def retrieve_account(self, account_id: str) -> RemoteAccountState: ...

    async def update_account(
        self,
        account_id: str,
        *,
        mcc: str,
        metadata: Mapping[str, str],
    ) -> RemoteAccountState: ...


GatewayFactory = Callable[[str], AccountGateway]


def _to_state(account: Any) -> RemoteAccountState:
    profile = getattr(account, "business_profile", None)
    mcc = getattr(profile, "mcc", None) if profile is not None else None
    metadata = getattr(account, "metadata", None) or {}
    return RemoteAccountState(
        account_id=str(getattr(account, "id", "")),
        mcc=mcc or None,
        metadata={str(key): str(value) for key, value in metadata.items()},
    )


def _gateway_error(exc: stripe.StripeError) -> GatewayError:
    return GatewayError(exc.user_message or str(exc))


class StripeAccountGateway:
    def __init__(self, client: stripe.StripeClient) -> None:
        self.client = client

    async def retrieve_account(self, account_id: str) -> RemoteAccountState:
        try:
            account = await self.client.v1.accounts.retrieve_async(account_id)
        except stripe.StripeError as exc:
            raise _gateway_error(exc) from exc
        return _to_state(account)

    async def update_account(
        self,
        account_id: str,
        *,
        mcc: str,
        metadata: Mapping[str, str],
    ) -> RemoteAccountState:
        params = {
            "business_profile": {"mcc": mcc},
            "metadata": dict(metadata),
        }
        try:
            account = await self.client.v1.accounts.update_async(account_id, params=params)
        except stripe.StripeError as exc:
            raise _gateway_error(exc) from exc
        return _to_state(account)


class StripeGatewayFactory:
    def __init__(self, api_version: str) -> None:
        self.api_version = api_version
        self._http_client: stripe.HTTPXClient | None = None
        self._gateways: dict[str, StripeAccountGateway] = {}

    def __call__(self, api_key: str) -> StripeAccountGateway:
        gateway = self._gateways.get(api_key)
        if gateway is None:
            # All tenants share one connection pool, opened on first use inside the running loop.
            if self._http_client is None:
                self._http_client = stripe.HTTPXClient()
            client = stripe.StripeClient(
                api_key,
                stripe_version=self.api_version,
                http_client=self._http_client,
            )
            gateway = StripeAccountGateway(client)
            self._gateways[api_key] = gateway
        return gateway

    async def aclose(self) -> None:
        http_client, self._http_client = self._http_client, None
        self._gateways.clear()
        if http_client is not None:
            await http_client.close_async()

    async def __aenter__(self) -> "StripeGatewayFactory":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
