"""Configuration management for Track Extender."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from extender.security.paths import canonicalize_root


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Directories
    uploads_dir: Path = Path("./uploads")
    results_dir: Path = Path("./results")

    # Track records are kept in memory unless a JSON file is configured
    store_path: Path | None = None

    # Admission limits
    max_upload_bytes: int = 15 * 1024 * 1024
    max_versions: int = 3

    # Worker
    max_concurrent_jobs: int = 2
    job_history_limit: int = 500
    transform_command: list[str] = ["python3", "-u", "audio_processor.py"]
    analyze_command: list[str] | None = None
    worker_timeout: float | None = None

    # Owner used when a request carries no X-Owner-Id header
    default_owner_id: str = "demo"

    def resolve_roots(self) -> tuple[Path, Path]:
        """Canonicalize the uploads and results roots.

        Raises:
            ConfigurationError: If either root is malformed.
        """
        return canonicalize_root(self.uploads_dir), canonicalize_root(self.results_dir)

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        uploads_root, results_root = self.resolve_roots()
        uploads_root.mkdir(parents=True, exist_ok=True)
        results_root.mkdir(parents=True, exist_ok=True)
        if self.store_path is not None:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
