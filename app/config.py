from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Team Knowledge Bot"
    debug: bool = False

    # Slack
    slack_bot_token: str = ""
    slack_signing_secret: str = ""

    # OpenAI (via gen_ai_hub proxy)
    openai_model: str = "gpt-5"
    temperature: float = 0.0

    # Knowledge documents
    knowledge_root_path: str = "../"  # Root of team folders
    root_document_path: str = "CLAUDE.md"  # CEO / default context

    # Flat-file tables (conversations.json, channel-settings.json)
    data_dir: str = "data"
    history_max_turns: int = 20

    # Generation
    answer_max_tokens: int = 4096
    review_max_tokens: int = 2048

    # Delivery
    stream_update_interval: float = 1.5  # Seconds between preview updates
    slack_max_length: int = 3900
    preview_max_length: int = 3000

    # Pending registrations
    pending_ttl_seconds: int = 86400
    pending_max_entries: int = 500

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
