"""Configuration settings for the application."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DOMPET_",
        case_sensitive=False,
    )

    app_name: str = "Dompet Finance API"
    debug: bool = False
    log_level: str = "INFO"
    database_path: str = "dompet.db"

    # The two workspace members
    owner_a: str = "aegg"
    owner_b: str = "peppaa"

    default_currency: str = "IDR"
    trend_window: int = 6

    @property
    def owners(self) -> tuple:
        return (self.owner_a, self.owner_b)


settings = Settings()
