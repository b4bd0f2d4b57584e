from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Service ---
    PROJECT_NAME: str = "Dawak_Pharmacy"
    LOG_LEVEL: str = "INFO"

    # --- Durable Store (Redis) ---
    REDIS_URL: str = "redis://localhost:6379/0"
    ORDERS_KEY: str = "dawak_orders"
    TOKEN_KEY: str = "dawak_token"

    # --- Status Simulation ---
    TICK_INTERVAL_SECONDS: float = 5.0
    ACCEPT_PROBABILITY: float = 0.3     # PENDING -> ACCEPTED
    DISPATCH_PROBABILITY: float = 0.3   # ACCEPTED -> ON_DELIVERY
    DELIVER_PROBABILITY: float = 0.2    # ON_DELIVERY -> DELIVERED

    # --- Order Identity ---
    ORDER_ID_PREFIX: str = "ORD-"
    ORDER_ID_DIGITS: int = 6

    # --- Pharmacy Portal ---
    TIMEZONE: str = "Asia/Riyadh"
    PHARMACY_EMAIL: str = "pharmacy@dawak.com"
    PHARMACY_PASSWORD: str = "123456"
    SUPPORT_PHONE: str = "+1234567890"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @field_validator("ACCEPT_PROBABILITY", "DISPATCH_PROBABILITY", "DELIVER_PROBABILITY")
    @classmethod
    def _check_probability(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("probability must be between 0 and 1")
        return value

    @field_validator("TICK_INTERVAL_SECONDS")
    @classmethod
    def _check_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("tick interval must be positive")
        return value

settings = Settings()
