from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Language Negotiation Service"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Logging settings
    log_level: str = "INFO"
    log_json: bool = True

    # Language settings
    default_language: str = "en"
    supported_languages: list[str] = ["en", "fr", "de", "es", "ar", "zh", "ja"]

    # Negotiation settings
    page_cache_enabled: bool = False
    url_negotiation_part: str = "prefix"
    negotiation_config_file: str = "data/language_negotiation.json"
    plugins_config_file: str = "data/plugins_config.json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
