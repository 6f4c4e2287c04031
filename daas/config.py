from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Persistence
    database_url: str = "sqlite:///./daas.sqlite3"
    seed_on_startup: bool = True

    # Notification service
    notifications_enabled: bool = True
    notification_base_url: str | None = None
    notification_timeout_seconds: float = 5.0
    notify_in_background: bool = False

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DAAS_")


settings = Settings()
