from dataclasses import dataclass
import os

from dotenv import load_dotenv


load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    log_level: str
    api_keys_path: str
    accounts_path: str
    results_path: str
    expected_mcc: str
    stripe_api_version: str
    fail_on_record_errors: bool
    schedule_hour_utc: int
    schedule_minute_utc: int


def get_settings() -> Settings:
    return Settings(
        app_name=os.getenv("APP_NAME", "mccfix"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        api_keys_path=os.getenv("API_KEYS_PATH", "./api-keys.json"),
        accounts_path=os.getenv("ACCOUNTS_PATH", "./accounts.csv"),
        results_path=os.getenv("RESULTS_PATH", "./results.csv"),
        expected_mcc=os.getenv("EXPECTED_MCC", "7512"),
        stripe_api_version=os.getenv("STRIPE_API_VERSION", "2022-08-01"),
        fail_on_record_errors=_env_flag("FAIL_ON_RECORD_ERRORS", "false"),
        schedule_hour_utc=int(os.getenv("SCHEDULE_HOUR_UTC", "2")),
        schedule_minute_utc=int(os.getenv("SCHEDULE_MINUTE_UTC", "0")),
    )
