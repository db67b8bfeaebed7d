"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="RTO_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Service
    service_name: str = "rto-validity"
    log_level: str = "INFO"
    timezone: str = "Asia/Kolkata"

    # National permit expiry thresholds (days remaining)
    urgent_days: int = 7
    part_a_expiring_soon_days: int = 60
    part_b_expiring_soon_days: int = 30

    # Driving licence expiry report bands
    licence_critical_days: int = 30
    licence_warning_days: int = 60
    licence_attention_days: int = 90

    # Learning licence
    learning_licence_expiring_soon_days: int = 30
    learning_licence_waiting_days: int = 30

    # Renew button, deliberately independent of the dashboard thresholds
    renew_window_days: int = 35

    # Default renewal fees (rupees)
    part_a_default_fee: int = 15_000
    part_b_default_fee: int = 5_000

    # Two-digit years: v <= pivot -> 2000+v, else 1900+v
    two_digit_year_pivot: int = 50


settings = Settings()
