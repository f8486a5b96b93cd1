from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.tasks.models import RetryPolicy, TaskStatus


class AwsConfig(BaseSettings):
    """AWS credentials shared by every boto3 client"""

    access_key: Optional[str] = None
    secret_key: Optional[SecretStr] = None
    region: str = "ap-northeast-1"

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class S3Config(BaseSettings):
    """S3 configuration"""

    bucket_name: Optional[str] = None
    prefix: str = "recognition"

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class TranscribeConfig(BaseSettings):
    """Amazon Transcribe batch job configuration."""

    language_code: str = "zh-CN"
    output_prefix: str = "transcripts"

    model_config = SettingsConfigDict(
        env_prefix="TRANSCRIBE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class RecognitionConfig(BaseSettings):
    """Submission, normalization and result wording for recognition tasks."""

    provider: Literal["transcribe", "mock"] = "transcribe"
    accepted_content_types: list[str] = [
        "audio/mp4",
        "audio/mpeg",
        "audio/mp3",
        "audio/wav",
        "audio/x-wav",
        "audio/aac",
        "audio/x-aac",
        "audio/m4a",
        "audio/x-m4a",
        "application/octet-stream",
    ]
    max_upload_bytes: int = Field(default=50 * 1024 * 1024, ge=1)
    sample_rate: int = 16000
    ffmpeg_binary: str = "ffmpeg"
    max_concurrent_pollers: int = Field(
        default=256,
        ge=1,
        description="Upper bound on background pollers querying the backend at once.",
    )
    empty_transcript_placeholder: str = "（无识别结果，可能是静音或无声音）"
    failure_message: str = "识别失败，请重新录音"
    timeout_message: str = "查询超时，请重试"
    backend_failure_status: TaskStatus = TaskStatus.FAILED
    backend_timeout_status: TaskStatus = TaskStatus.FAILED
    mock_pending_queries: int = Field(default=1, ge=0)

    @field_validator("backend_failure_status", "backend_timeout_status")
    @classmethod
    def _terminal_failure_status(cls, value: TaskStatus) -> TaskStatus:
        if value not in (TaskStatus.FAILED, TaskStatus.TIMEOUT):
            raise ValueError("must be failed or timeout")
        return value

    model_config = SettingsConfigDict(
        env_prefix="RECOGNITION_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class PollingConfig(BaseSettings):
    """Server-side background poller budget."""

    max_attempts: int = Field(default=30, ge=1)
    interval_seconds: float = Field(default=2.0, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="POLL_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    def policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            interval=self.interval_seconds,
            initial_delay=False,
        )


class ClientPollingConfig(BaseSettings):
    """Budget used by callers polling the status endpoint."""

    max_attempts: int = Field(default=5, ge=1)
    interval_seconds: float = Field(default=1.0, ge=0)
    upload_retries: int = Field(default=2, ge=1)
    upload_retry_delay_seconds: float = Field(default=2.0, ge=0)
    request_timeout_seconds: float = Field(default=300.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="CLIENT_POLL_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    def policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            interval=self.interval_seconds,
            initial_delay=True,
        )


class PollyConfig(BaseSettings):
    """Amazon Polly configuration."""

    region: Optional[str] = None
    female_voice_id: str = "Zhiyu"
    male_voice_id: str = "Hiujin"
    engine: str = "neural"

    model_config = SettingsConfigDict(
        env_prefix="POLLY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration used for translation."""

    region: Optional[str] = Field(
        default=None,
        validation_alias="BEDROCK_REGION",
    )
    model_id: str = Field(
        default="amazon.nova-micro-v1:0",
        validation_alias="BEDROCK_MODEL_ID",
    )
    max_tokens: int = Field(
        default=2000,
        validation_alias="BEDROCK_MAX_TOKENS",
        ge=1,
        le=4096,
    )
    temperature: float = Field(
        default=0.3,
        validation_alias="BEDROCK_TEMPERATURE",
        ge=0.0,
        le=1.0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Audio-to-Text Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    log_file: str = "logs/app.log"
    task_log_file: str = "logs/recognition_tasks.log"

    # AWS
    aws: AwsConfig = Field(default_factory=AwsConfig)

    # S3
    s3: S3Config = Field(default_factory=S3Config)

    # Transcribe
    transcribe: TranscribeConfig = Field(default_factory=TranscribeConfig)

    # Recognition tasks
    recognition: RecognitionConfig = Field(default_factory=RecognitionConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    client_polling: ClientPollingConfig = Field(default_factory=ClientPollingConfig)

    # Polly
    polly: PollyConfig = Field(default_factory=PollyConfig)

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

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
