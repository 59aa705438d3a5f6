import tempfile
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProbeConfig(BaseModel):
    ffprobe_path: str = Field(default="ffprobe", description="Path to the ffprobe executable")
    version_check_timeout: float = Field(default=10.0, gt=0, description="Timeout for `ffprobe -version` in seconds")
    include_raw_output: bool = Field(default=False, description="Add the raw ffprobe document to success responses")

class DownloadConfig(BaseModel):
    connect_timeout: float = Field(default=30.0, gt=0, description="Connect timeout in seconds")
    transfer_timeout: float = Field(default=240.0, gt=0, description="Total transfer timeout in seconds")
    max_redirects: int = Field(default=10, ge=0, description="Maximum redirects to follow")
    verify_tls: bool = Field(default=True, description="Verify TLS certificate and hostname")
    chunk_size: int = Field(default=1024 * 1024, ge=1024, description="Streaming chunk size in bytes")
    user_agent: str = Field(default="media-info-api/1.0", description="User-Agent sent to remote hosts")

class StorageConfig(BaseModel):
    temp_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "media_info_files",
        description="Directory for downloaded media files"
    )
    log_subdir: str = Field(default="logs", description="Per-request log directory under temp_dir")

    @property
    def log_dir(self) -> Path:
        return self.temp_dir / self.log_subdir

class ProcessingConfig(BaseModel):
    max_execution_seconds: float = Field(default=300.0, gt=0, description="Overall budget for download and probe")

class SecurityConfig(BaseModel):
    enable_ssrf_protection: bool = Field(default=False, description="Enable SSRF protection")
    allow_private_ips: bool = Field(default=False, description="Allow private IP ranges")
    allow_localhost: bool = Field(default=False, description="Allow localhost access")

class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")
    request_log_files: bool = Field(default=True, description="Write one log file per request")

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")

class ApiConfig(BaseModel):
    title: str = Field(default="Media File Information API", description="API title")
    description: str = Field(default="Download a media file and report its ffprobe metadata", description="API description")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")

class Config(BaseSettings):
    """Main configuration, overridable with MEDIA_INFO_<SECTION>__<KEY> variables"""

    model_config = SettingsConfigDict(
        env_prefix="MEDIA_INFO_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

config = Config()
