"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Event Planner"
    debug: bool = False
    log_dir: str = "~/.logs/planner"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./event_planner.db"

    # Scan ceilings
    co_coordinator_scan_window: int = 500  # Most recent events checked for co-coordinators
    stats_sample_limit: int = 5000  # Tasks/expenses sampled per event for statistics
    stats_participant_limit: int = 500  # Participants sampled per room for statistics
    message_page_size: int = 50

    # Hard delete (operator tooling only)
    hard_delete_batch_size: int = 100
    hard_delete_max_rows: int = 50000

    # Content rules
    message_max_length: int = 10000
    invitation_ttl_days: int = 7


settings = Settings()
