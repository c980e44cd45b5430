"""Configuration management using pydantic-settings."""
import tempfile
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Hosted img2img model (Gradio Space)
    gradio_space: str = "sweetpotatoman/SDXL-Turbo-Img2Img-CPU"
    hf_token: str = ""
    predict_api_name: str = "/predict"
    seed_api_name: str = "/get_random_value"

    # Outbound timeouts (seconds)
    generation_timeout_seconds: float = 120.0
    fetch_timeout_seconds: float = 30.0

    # Where gradio_client stores downloaded outputs; only files here are read back
    gradio_download_dir: str = str(Path(tempfile.gettempdir()) / "sketch-stylizer")

    # Application settings
    app_name: str = "sketch-stylizer"

    # Server settings
    backend_host: str = "localhost"
    backend_port: int = 3001
    frontend_port: int = 3000
    cors_origins: list[str] = []

    def allowed_origins(self) -> list[str]:
        """Explicit CORS origins, or the local frontend when none are configured."""
        return self.cors_origins or [f"http://localhost:{self.frontend_port}"]


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
