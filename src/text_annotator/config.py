"""
Application configuration management.

This module handles configuration from environment variables using Pydantic Settings.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration from environment variables.

    All settings can be overridden via environment variables with the same name.
    """

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Annotation pipeline
    annotation_cache_size: int = 128

    # NER provider selection ("auto" | "off" | provider id)
    ner_provider_mode: str = "auto"
    ner_preferences_path: str = ""  # Empty = selection is not persisted

    # Fast on-device tier (spaCy)
    spacy_model_name: str = "en_core_web_sm"
    spacy_ner_confidence: float = 0.75

    # General on-device tier (Ollama)
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "qwen3:0.6b"
    ollama_max_tokens: int = 200
    ollama_temperature: float = 0.0

    # Cloud tier
    cloud_ner_base_url: str = ""  # Empty = cloud tier never available
    cloud_ner_api_key: str = ""
    cloud_ner_timeout_seconds: float = 10.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


# Global settings instance
settings = Settings()
