from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./billing.db"
    secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    admin_token_expire_minutes: int = 60 * 24
    admin_username: str = "admin"
    admin_password_hash: str = ""
    default_tax_rate: Decimal = Decimal("18")
    invoice_number_strategy: str = "counter"
    invoice_number_max_attempts: int = 100
    overdue_warning_days: int = 3
    log_level: str = "INFO"
    debug: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="")


settings = Settings()
