"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="BIZLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./bizledger.db"
    sql_echo: bool = False

    # Ledger
    default_disbursement_account_id: int = 1  # Account debited when payroll is paid
    default_currency: str = "$"
    invoice_number_prefix: str = "INV-"
    invoice_number_width: int = 5

    # Service
    service_name: str = "bizledger"
    log_level: str = "INFO"


settings = Settings()
