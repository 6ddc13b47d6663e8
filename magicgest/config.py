from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "MagicGest"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./magicgest.db"

    scryfall_api_url: str = "https://api.scryfall.com"
    scryfall_timeout: float = 30.0
    user_agent: str = "MagicGest/1.0"

    cors_origins: list[str] = ["*"]


settings = Settings()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
