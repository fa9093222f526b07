"""Configuration management for the Fable story memory service.

This module provides centralized configuration for all memory components.
All settings are loaded from environment variables with sensible defaults.

Environment Variables:
    Required:
        OPENAI_API_KEY: OpenAI API key (when an OpenAI model or embedder is used)

    Models (PydanticAI format - provider:model):
        TEXT_MODEL: Model for summaries, character extraction and answers

    Storage:
        DB_PATH: SQLite database file path (source of truth)
        VECTOR_DB_PATH: Directory for the local ChromaDB index
        CHROMA_HOST: Remote ChromaDB server host (overrides VECTOR_DB_PATH)
        CHROMA_PORT: Remote ChromaDB server port
        COLLECTION_NAME: ChromaDB collection holding story summaries

    Embeddings:
        EMBEDDING_PROVIDER: 'openai' or 'local' (sentence-transformers)
        EMBEDDING_MODEL: Embedding model name for the chosen provider

    Optional Features:
        ENABLE_LOGFIRE: Enable Logfire/OpenTelemetry tracing

    Logging:
        LOG_DIR: Directory for log files
        LOG_LEVEL: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_BACKUP_COUNT: Number of rotated log files to keep
        LOG_MAX_BYTES: Max log file size in bytes (0 = time-based rotation)
        LOG_FORMAT: Log format ('text' or 'json' for structured logging)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _env(key: str, default: str = "") -> str:
    """Get string environment variable with optional default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Environment variable value or default
    """
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Parsed integer or default value

    Raises:
        ValueError: If value is set but cannot be parsed as integer
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer value for {key}: '{val}'")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable with default.

    Recognizes truthy values: '1', 'true', 'yes', 'on'
    Recognizes falsy values: '0', 'false', 'no', 'off'
    """
    val = os.environ.get(key, "").lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


DEFAULT_TEXT_MODEL = "openai:gpt-4o"
DEFAULT_COLLECTION = "story_summaries"

# Default embedding model per provider
DEFAULT_EMBEDDING_MODELS = {
    "openai": "text-embedding-3-small",
    "local": "BAAI/bge-small-en-v1.5",
}


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    All settings can be overridden via environment variables. Use Config.load()
    to create an instance with values from the environment.

    Example:
        >>> config = Config.load()
        >>> if error := config.validate():
        ...     print(f"Config error: {error}")
    """

    # === Required ===
    openai_api_key: str = ""  # OPENAI_API_KEY

    # === AI Models ===
    # PydanticAI format: provider:model, or openai:model@base_url for a local server
    text_model: str = DEFAULT_TEXT_MODEL  # TEXT_MODEL

    # === Durable Store ===
    db_path: Path = field(default_factory=lambda: Path("stories.db"))  # DB_PATH

    # === Vector Index ===
    vector_db_path: Path = field(default_factory=lambda: Path("vectors"))  # VECTOR_DB_PATH
    chroma_host: str = ""  # CHROMA_HOST - Remote server, empty = local persistent index
    chroma_port: int = 8000  # CHROMA_PORT
    collection_name: str = DEFAULT_COLLECTION  # COLLECTION_NAME

    # === Embeddings ===
    embedding_provider: str = "openai"  # EMBEDDING_PROVIDER - 'openai' or 'local'
    embedding_model: str = DEFAULT_EMBEDDING_MODELS["openai"]  # EMBEDDING_MODEL

    # === Output Directories ===
    log_dir: Path = field(default_factory=lambda: Path("log"))  # LOG_DIR

    # === Logging Configuration ===
    log_level: str = "INFO"  # LOG_LEVEL - DEBUG, INFO, WARNING, ERROR
    log_backup_count: int = 30  # LOG_BACKUP_COUNT - Number of rotated logs to keep
    log_max_bytes: int = 0  # LOG_MAX_BYTES - Max file size (0 = time-based rotation)
    log_format: str = "text"  # LOG_FORMAT - 'text' or 'json' for structured logging

    # === Optional: Observability ===
    # Requires: pip install logfire
    enable_logfire: bool = False  # ENABLE_LOGFIRE - Enable distributed tracing
    logfire_token: str = ""  # LOGFIRE_TOKEN - Authentication token

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables."""
        provider = _env("EMBEDDING_PROVIDER", "openai").lower()
        return cls(
            openai_api_key=_env("OPENAI_API_KEY"),
            text_model=_env("TEXT_MODEL", DEFAULT_TEXT_MODEL),
            db_path=Path(_env("DB_PATH", "stories.db")),
            vector_db_path=Path(_env("VECTOR_DB_PATH", "vectors")),
            chroma_host=_env("CHROMA_HOST"),
            chroma_port=_env_int("CHROMA_PORT", 8000),
            collection_name=_env("COLLECTION_NAME", DEFAULT_COLLECTION),
            embedding_provider=provider,
            embedding_model=_env("EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODELS.get(provider, "")),
            log_dir=Path(_env("LOG_DIR", "log")),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 30),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
        )

    @property
    def needs_openai_key(self) -> bool:
        """Whether any configured component talks to the OpenAI API."""
        # Local OpenAI-compatible servers (openai:model@base_url) need no key
        remote_openai = self.text_model.startswith("openai:") and "@" not in self.text_model
        return remote_openai or self.embedding_provider == "openai"

    def validate(self) -> str | None:
        """Validate configuration for required fields and valid values.

        Returns:
            Error message string if invalid, None if valid.
        """
        if self.needs_openai_key and not self.openai_api_key:
            return "OPENAI_API_KEY environment variable is required"
        if not self.text_model:
            return "TEXT_MODEL must not be empty"
        if self.embedding_provider not in ("openai", "local"):
            return f"Invalid EMBEDDING_PROVIDER '{self.embedding_provider}' - must be 'openai' or 'local'"
        if not self.embedding_model:
            return "EMBEDDING_MODEL must not be empty"
        if not self.collection_name:
            return "COLLECTION_NAME must not be empty"
        if self.chroma_port <= 0:
            return "CHROMA_PORT must be positive"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None
