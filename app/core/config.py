from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    # Environment
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "Koperasi POS API"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Point of sale, inventory and member credit API for a cooperative store"

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "koperasi"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Sales
    TRANSACTION_NUMBER_PREFIX: str = "TRX"
    LOW_STOCK_THRESHOLD: int = 10
    # Reject sales that exceed available stock instead of clamping to zero
    STRICT_STOCK: bool = False

    # Debt payments
    PAYMENT_MAX_RETRIES: int = 3
    # Commit balance and payment record in one transaction (needs a replica set)
    MONGODB_TRANSACTIONS: bool = False

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
