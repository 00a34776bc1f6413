from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "NameSpark"
    debug: bool = False

    database_url: str = "sqlite:///./namespark.db"

    openai_api_key: Optional[str] = None
    openai_api_base: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.8
    openai_max_tokens: int = 4000
    openai_timeout: float = 120.0

    name_count: int = 18
    stream_timeout: Optional[float] = 60.0

    namecheap_api_key: Optional[str] = None
    namecheap_username: Optional[str] = None
    namecheap_client_ip: Optional[str] = None
    namecheap_api_url: str = "https://api.namecheap.com/xml.response"
    namecheap_sandbox_url: str = "https://api.sandbox.namecheap.com/xml.response"
    namecheap_sandbox: bool = False
    namecheap_timeout: float = 15.0

    generations_per_day: int = 5
    domain_checks_per_day: int = 10

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False


settings = Settings()
