"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


# Settings that must be non-empty before the bot can start.
REQUIRED_SETTINGS = ("telegram_bot_token", "telegram_chat_id", "anthropic_api_key")


class Settings(BaseSettings):
    """Pigeon configuration. All values come from environment variables."""

    # Telegram
    telegram_bot_token: str = Field(default="")
    telegram_chat_id: int = Field(default=0)

    # Anthropic
    anthropic_api_key: str = Field(default="")
    claude_model: str = Field(default="sonnet")
    thinking: str = Field(default="off")
    max_tool_rounds: int = Field(default=20)

    # Storage (task queue, weekly memory, shutdown state)
    data_dir: Path = Field(default=Path("data"))

    # Conversation
    conversation_window_size: int = Field(default=50)
    history_messages: int = Field(default=20)

    # Background worker
    worker_poll_interval: float = Field(default=5.0, gt=0)
    worker_busy_interval: float = Field(default=0.1, gt=0)
    task_max_age_days: int = Field(default=7)

    # Coding tools (bash and file access for both agents)
    workspace_dir: Path | None = Field(default=None)
    bash_timeout: float = Field(default=120.0, gt=0)

    # Interactive replies
    typing_interval: float = Field(default=4.0)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def missing_required(self) -> list[str]:
        """Return the env var names of required settings that are unset."""
        return [name.upper() for name in REQUIRED_SETTINGS if not getattr(self, name)]

    @property
    def memory_dir(self) -> Path:
        return self.data_dir / "memory"

    @property
    def queue_path(self) -> Path:
        return self.data_dir / "queue.json"

    @property
    def state_path(self) -> Path:
        return self.data_dir / "state.json"

    @property
    def workspace(self) -> Path:
        """Directory the coding tools work in: ``workspace_dir`` or the process cwd."""
        return self.workspace_dir or Path.cwd()


settings = Settings()
