"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class DraftConfig(BaseSettings):
    """Draft persistence configuration."""

    model_config = {"env_prefix": "GRIEVANCE_DRAFT_"}

    storage_dir: str = "data/drafts"
    key: str = "grievanceDraft"
    autosave_delay_seconds: float = 1.0


class GatewayConfig(BaseSettings):
    """Submission gateway configuration."""

    model_config = {"env_prefix": "GRIEVANCE_GATEWAY_"}

    latency_seconds: float = 1.5


class UploadConfig(BaseSettings):
    """Attachment limits."""

    model_config = {"env_prefix": "GRIEVANCE_UPLOAD_"}

    max_files: int = 5
    max_file_size_bytes: int = 5 * 1024 * 1024


class IntakeConfig(BaseSettings):
    """Wizard definition configuration."""

    model_config = {"env_prefix": "GRIEVANCE_INTAKE_"}

    wizard_path: str | None = None


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "GRIEVANCE_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    draft: DraftConfig = Field(default_factory=DraftConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    intake: IntakeConfig = Field(default_factory=IntakeConfig)
