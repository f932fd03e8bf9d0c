# imposterbot/core/config.py

import pathlib
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root is 3 levels up from this file (imposterbot/core/config.py).
_PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent.parent
_ENV_PATH_FILE = _PROJECT_ROOT / ".env.path"

if not _ENV_PATH_FILE.exists():
    raise FileNotFoundError(
        f"Missing {_ENV_PATH_FILE}. "
        "Create it and put the absolute path to your .env file inside."
    )

_env_file = pathlib.Path(_ENV_PATH_FILE.read_text().strip())

if not _env_file.exists():
    raise FileNotFoundError(
        f".env file not found at '{_env_file}' (read from {_ENV_PATH_FILE}). "
        "Check that the path in .env.path is correct."
    )


class Settings(BaseSettings):
    """
    Manages all application settings.
    Loads variables from the .env file whose path is in .env.path.
    """

    model_config = SettingsConfigDict(env_file_encoding="utf-8", extra="ignore")

    # Discord Bot Settings
    DISCORD_BOT_TOKEN: str

    # Database Settings
    DB_USER: str
    DB_PASSWORD: str
    DB_HOST: str
    DB_PORT: int = 5432
    DB_NAME: str

    # Uploaded notification media is stored under <DATA_DIRECTORY>/user_content/<guild_id>/
    DATA_DIRECTORY: pathlib.Path = pathlib.Path("data")
    MEDIA_DOWNLOAD_TIMEOUT_SECONDS: float = 30.0

    LOG_LEVEL: str = "INFO"

    # Observability (optional)
    SENTRY_DSN: str | None = None
    BOT_LOGS_WEBHOOK_URL: str | None = None


# Create a single, importable instance of our settings.
settings = Settings(_env_file=str(_env_file))
