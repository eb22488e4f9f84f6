import csv
from pathlib import Path

from mccfix.schemas import AccountRecord, ResultRecord


INPUT_COLUMNS = ("connectedAccountId", "platformAccountId")
OUTPUT_COLUMNS = ("platformAccountId", "connectedAccountId", "result")


def read_account_records(input_path: Path) -> list[AccountRecord]:
    if not input_path.exists():
        raise FileNotFoundError(f"input file not found: {input_path}")

    # The whole file is decoded up front, which bounds batch size by memory.
    records: list[AccountRecord] = []
    with input_path.open("r", encoding="utf-8-sig", newline="") as infile:
        reader = csv.DictReader(infile)
        missing = [column for column in INPUT_COLUMNS if column not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"input file {input_path} is missing columns: {', '.join(missing)}")

        for row in reader:
            connected_account_id = (row.get("connectedAccountId") or "").strip()
            platform_account_id = (row.get("platformAccountId") or "").strip()
            records.append(
                AccountRecord(
                    connected_account_id=connected_account_id,
                    platform_account_id=platform_account_id,
                )
            )
    return records


def write_result_records(output_path: Path, results: list[ResultRecord]) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as outfile:
        writer = csv.writer(outfile, lineterminator="\n")
        writer.writerow(OUTPUT_COLUMNS)
        for result in results:
            writer.writerow([result.platform_account_id, result.connected_account_id, result.result.value])
