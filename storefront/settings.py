# storefront/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env', env_file_encoding='utf-8', extra='ignore'
    )

    API_BASE_URL: str = 'http://localhost:8085'

    KEYCLOAK_URL: str = 'http://localhost:8080'
    KEYCLOAK_REALM: str = 'microservices-realm'
    KEYCLOAK_CLIENT_ID: str = 'react-client'

    TOKEN_LEEWAY_SECONDS: int = 5
    TOKEN_MIN_VALIDITY_SECONDS: int = 30

    ADMIN_ROLE: str = 'ADMIN'
    LOG_LEVEL: str = 'INFO'
