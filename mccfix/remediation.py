from collections.abc import Callable
from datetime import UTC, datetime
from email.utils import format_datetime
import logging

from mccfix.credentials import CredentialTable
from mccfix.gateway import GatewayError, GatewayFactory
from mccfix.schemas import Outcome


logger = logging.getLogger(__name__)

MISSING_MCC = "n/a"


def utc_now() -> datetime:
    return datetime.now(UTC)


class MccRemediationEngine:
    def __init__(
        self,
        credentials: CredentialTable,
        gateway_factory: GatewayFactory,
        *,
        expected_mcc: str,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.credentials = credentials
        self.gateway_factory = gateway_factory
        self.expected_mcc = expected_mcc
        self.clock = clock

    async def remediate(self, platform_account_id: str, connected_account_id: str) -> Outcome:
        log_prefix = f"[{platform_account_id} / {connected_account_id}]"
        context = {
            "platform_account_id": platform_account_id,
            "connected_account_id": connected_account_id,
        }

        api_key = self.credentials.resolve(platform_account_id)
        if api_key is None:
            logger.error(
                "%s No API key for this platform account",
                log_prefix,
                extra={**context, "outcome": Outcome.PLATFORM_API_KEY_MISSING.value},
            )
            return Outcome.PLATFORM_API_KEY_MISSING

        try:
            gateway = self.gateway_factory(api_key)
            account = await gateway.retrieve_account(connected_account_id)
        except Exception as exc:
            self._log_failure(log_prefix, "Could not retrieve connected account", exc, context, Outcome.ACCOUNT_NOT_RETRIEVABLE)
            return Outcome.ACCOUNT_NOT_RETRIEVABLE

        if account.mcc == self.expected_mcc:
            logger.info(
                "%s No MCC fix needed",
                log_prefix,
                extra={**context, "outcome": Outcome.NO_FIX_NEEDED.value},
            )
            return Outcome.NO_FIX_NEEDED

        metadata = {
            "mcc_old_value": account.mcc or MISSING_MCC,
            "mcc_fixed_at": format_datetime(self.clock().astimezone(UTC), usegmt=True),
        }
        try:
            await gateway.update_account(connected_account_id, mcc=self.expected_mcc, metadata=metadata)
        except Exception as exc:
            self._log_failure(log_prefix, "Could not update connected account", exc, context, Outcome.ACCOUNT_NOT_UPDATABLE)
            return Outcome.ACCOUNT_NOT_UPDATABLE

        logger.info(
            '%s Set MCC to "%s"',
            log_prefix,
            self.expected_mcc,
            extra={**context, "outcome": Outcome.FIXED.value, "mcc_old_value": metadata["mcc_old_value"]},
        )
        return Outcome.FIXED

    def _log_failure(
        self,
        log_prefix: str,
        action: str,
        exc: Exception,
        context: dict[str, str],
        outcome: Outcome,
    ) -> None:
        # Only the log line differs between structured and unclassified errors.
        if isinstance(exc, GatewayError):
            logger.error("%s %s: %s", log_prefix, action, exc.message, extra={**context, "outcome": outcome.value})
        else:
            logger.error("%s Unknown error: %s", log_prefix, exc, extra={**context, "outcome": outcome.value})
