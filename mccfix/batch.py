import asyncio
from collections import Counter
import logging
from pathlib import Path

from mccfix.config import Settings
from mccfix.credentials import load_credentials
from mccfix.gateway import GatewayFactory, StripeGatewayFactory
from mccfix.record_io import read_account_records, write_result_records
from mccfix.remediation import MccRemediationEngine
from mccfix.schemas import AccountRecord, BatchResult, Outcome, ResultRecord


logger = logging.getLogger(__name__)


class BatchRunner:
    def __init__(
        self,
        settings: Settings,
        *,
        gateway_factory: GatewayFactory | None = None,
        engine: MccRemediationEngine | None = None,
    ) -> None:
        self.settings = settings
        self.gateway_factory = gateway_factory
        self.engine = engine

    def run(self) -> BatchResult:
        return asyncio.run(self.run_async())

    async def run_async(self) -> BatchResult:
        if self.engine is not None or self.gateway_factory is not None:
            return await self._run_pass(self.gateway_factory)

        # The shared HTTP client belongs to this event loop, so it is built and closed per run.
        stripe_factory = StripeGatewayFactory(self.settings.stripe_api_version)
        try:
            return await self._run_pass(stripe_factory)
        finally:
            await stripe_factory.aclose()

    async def remediate_records(
        self,
        records: list[AccountRecord],
        engine: MccRemediationEngine | None = None,
    ) -> list[ResultRecord]:
        engine = engine or self.engine
        if engine is None:
            raise ValueError("a remediation engine is required")

        results: list[ResultRecord] = []
        # One record at a time, in input order.
        for record in records:
            outcome = await engine.remediate(record.platform_account_id, record.connected_account_id)
            results.append(
                ResultRecord(
                    platform_account_id=record.platform_account_id,
                    connected_account_id=record.connected_account_id,
                    result=outcome,
                )
            )
        return results

    async def _run_pass(self, gateway_factory: GatewayFactory | None) -> BatchResult:
        results_path = Path(self.settings.results_path)
        try:
            engine = self.engine or self._build_engine(gateway_factory)
            records = read_account_records(Path(self.settings.accounts_path))
        except Exception:
            logger.exception(
                "could not load batch inputs",
                extra={"api_keys_path": self.settings.api_keys_path, "accounts_path": self.settings.accounts_path},
            )
            raise

        logger.info("batch started", extra={"total_records": len(records)})
        results = await self.remediate_records(records, engine)

        try:
            write_result_records(results_path, results)
        except Exception:
            logger.exception("could not write results", extra={"results_path": str(results_path)})
            raise

        batch_result = self._summarize(results, results_path)
        logger.info(
            "batch completed",
            extra={
                "total_records": batch_result.total_records,
                "failed_records": batch_result.failed_records,
                "results_path": batch_result.results_path,
                **{outcome.value.lower(): count for outcome, count in batch_result.counts.items()},
            },
        )
        return batch_result

    def _build_engine(self, gateway_factory: GatewayFactory | None) -> MccRemediationEngine:
        if gateway_factory is None:
            raise ValueError("a gateway factory is required to build the remediation engine")
        credentials = load_credentials(Path(self.settings.api_keys_path))
        return MccRemediationEngine(
            credentials,
            gateway_factory,
            expected_mcc=self.settings.expected_mcc,
        )

    def _summarize(self, results: list[ResultRecord], results_path: Path) -> BatchResult:
        tally = Counter(result.result for result in results)
        return BatchResult(
            total_records=len(results),
            counts={outcome: tally.get(outcome, 0) for outcome in Outcome},
            results_path=str(results_path),
            results=results,
        )
