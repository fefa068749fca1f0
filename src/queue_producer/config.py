"""
Configuration management for the queue producer.

Loads settings from environment variables (and a project-root ``.env``)
with sensible defaults.
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .models import BrokerEndpoint, Credentials, parse_endpoints

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / '.env'
if _env_file.exists():
    load_dotenv(_env_file)

DEFAULT_BROKER_URL_FORMAT = (
    'http://{username}:{password}@{host}/api/message'
    '?destination=queue://{queue}&jms.closeTimeout=5000'
)


class ProducerSettings(BaseSettings):
    """Producer settings loaded from environment variables."""

    # Broker cluster
    BROKER_HOSTS: str
    BROKER_USER: str = 'admin'
    BROKER_PASSWORD: str = 'admin'
    BROKER_URL_FORMAT: str = DEFAULT_BROKER_URL_FORMAT
    BROKER_NAME: str = 'localhost'

    # Delivery
    MAX_ATTEMPTS: int = Field(default=2, ge=1, le=10)
    HTTP_TIMEOUT_SECONDS: float = Field(default=10, ge=1, le=120)
    PROBE_TIMEOUT_SECONDS: float = Field(default=3, ge=1, le=30)

    # Logging
    LOG_LEVEL: str = 'INFO'
    LOG_JSON: bool = False

    @field_validator('BROKER_HOSTS')
    @classmethod
    def _check_hosts(cls, value: str) -> str:
        if not parse_endpoints(value):
            raise ValueError('BROKER_HOSTS must list at least one host:port')
        return value

    @property
    def endpoints(self) -> tuple[BrokerEndpoint, ...]:
        return parse_endpoints(self.BROKER_HOSTS)

    @property
    def credentials(self) -> Credentials:
        return Credentials(username=self.BROKER_USER, password=self.BROKER_PASSWORD)


@lru_cache
def get_settings() -> ProducerSettings:
    """Cached settings singleton."""
    return ProducerSettings()
