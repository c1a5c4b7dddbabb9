from pathlib import Path
from typing import List, Literal

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Ticketing Payment Pipeline'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production
    SERVICE_NAME: str = 'ticketing-payment-service'

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ALGORITHM: str = 'HS256'
    STAFF_API_TOKEN: SecretStr = SecretStr('test_staff_token')

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'ticketing_payment_db'
    DATABASE_URL: str = ''  # full override, e.g. sqlite+aiosqlite:///./local.db

    # Connection pool
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    DB_POOL_PRE_PING: bool = True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # Payment gateway
    PAYMENT_GATEWAY: Literal['mock', 'razorpay'] = 'mock'
    RAZORPAY_BASE_URL: str = 'https://api.razorpay.com/v1'
    RAZORPAY_KEY_ID: str = ''
    RAZORPAY_KEY_SECRET: SecretStr = SecretStr('')
    RAZORPAY_WEBHOOK_SECRET: SecretStr = SecretStr('test_webhook_secret')
    GATEWAY_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_CALLBACK_URL: str = 'http://localhost:3000/payment/callback'
    CURRENCY: str = 'INR'

    @field_validator('PAYMENT_GATEWAY', mode='before')
    @classmethod
    def normalize_gateway(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v

    # Tickets
    PUBLIC_BASE_URL: str = 'http://localhost:8000'
    TICKET_TOKEN_EXPIRE_DAYS: int = 30
    SEAT_RESERVATION_TTL_MINUTES: int = 15

    # Notifications (empty URL means log-only delivery)
    NOTIFICATION_API_URL: str = ''
    NOTIFICATION_API_TOKEN: SecretStr = SecretStr('')


settings = Settings()  # type: ignore
