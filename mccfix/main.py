import argparse
import logging

from mccfix.batch import BatchRunner
from mccfix.config import get_settings
from mccfix.scheduler import start_scheduler
from mccfix.schemas import Outcome


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fix the MCC of connected accounts")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="run one remediation pass")

    schedule_parser = subparsers.add_parser("schedule", help="start daily scheduler")
    schedule_parser.add_argument("--run-now", action="store_true", help="also run once immediately")

    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args.command == "schedule":
        start_scheduler(settings, run_now=args.run_now)
        return

    result = BatchRunner(settings).run()

    counts = " ".join(f"{outcome.value.lower()}={result.counts[outcome]}" for outcome in Outcome)
    print(f"total={result.total_records} {counts} failed={result.failed_records} results={result.results_path}")
    if settings.fail_on_record_errors and result.failed_records:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
