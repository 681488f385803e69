from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    REDIS_URL: str = "redis://localhost:6379/0"
    USE_REDIS: bool = False  # Set to True to persist the library in Redis instead of in-memory
    STORAGE_KEY: str = "lyric-pad-songs"
    CHANGES_CHANNEL: str = "lyric-pad:changes"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


settings = Settings()
