from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Incident Bot"
    debug: bool = False

    # Slack
    slack_bot_token: str = ""
    slack_archive_base_url: str = "https://slack.com"

    # Incidents
    incident_channel_prefix: str = "incident_"
    team_update_channel_id: str = ""  # Empty disables team announcements
    history_limit: int = 1000  # Messages fetched for timeline reports

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
