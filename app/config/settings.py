from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ImageBackendConfig(BaseSettings):
    """Image analysis backend configuration"""

    url: str = "http://vision-api:5000"
    submit_path: str = "/"
    health_path: str = "/health"
    request_timeout: float = Field(default=120.0, gt=0)
    health_timeout: float = Field(default=3.0, gt=0)
    input_prefix: str = Field(
        default="/app/test_images",
        description="Directory where the backend sees the image scratch directory.",
    )
    output_prefix: str = Field(
        default="/app/output",
        description="Directory where the backend writes result files.",
    )
    success_statuses: list[str] = ["ok", "success", "completed"]

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_BACKEND_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class AudioBackendConfig(BaseSettings):
    """Audio analysis backend configuration"""

    url: str = "http://audio-api:5000"
    submit_path: str = "/predict_from_json"
    health_path: str = "/health"
    request_timeout: float = Field(default=600.0, gt=0)
    health_timeout: float = Field(default=3.0, gt=0)
    input_prefix: str = Field(
        default="/requests",
        description="Directory where the backend sees the audio scratch directory.",
    )
    output_prefix: str = "/results"

    model_config = SettingsConfigDict(
        env_prefix="AUDIO_BACKEND_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class ScratchConfig(BaseSettings):
    """Transient per-request file locations shared with the backends."""

    image_dir: str = "test_images"
    audio_dir: str = "test_audio"
    output_dir: str = "output"

    model_config = SettingsConfigDict(
        env_prefix="SCRATCH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class PollingConfig(BaseSettings):
    """Result file polling bounds."""

    timeout: float = Field(default=60.0, gt=0)
    interval: float = Field(default=0.5, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="POLL_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Media Analysis Gateway"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/analysis_pipeline.log"

    # Backends
    image_backend: ImageBackendConfig = Field(default_factory=ImageBackendConfig)
    audio_backend: AudioBackendConfig = Field(default_factory=AudioBackendConfig)

    # Scratch space
    scratch: ScratchConfig = Field(default_factory=ScratchConfig)

    # Result polling
    polling: PollingConfig = Field(default_factory=PollingConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
