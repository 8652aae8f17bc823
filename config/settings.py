"""Application settings using Pydantic."""
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///intake.db",
        description="SQLAlchemy database URL",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for a rotating log file",
    )

    # IMAP (inbound applications)
    enable_email_reader: bool = Field(
        default=True,
        description="Set to false to keep the mailbox poller disabled",
    )
    imap_host: Optional[str] = Field(default=None, description="IMAP server host")
    imap_port: int = Field(default=993, description="IMAP server port")
    imap_secure: bool = Field(default=True, description="Use implicit TLS for IMAP")
    imap_user: Optional[str] = Field(default=None, description="IMAP username")
    imap_password: Optional[str] = Field(default=None, description="IMAP password")
    imap_poll_ms: int = Field(
        default=10_000,
        description="Delay between mailbox polls (milliseconds)",
    )
    imap_timeout_seconds: float = Field(
        default=30.0,
        description="Socket timeout for IMAP connect and commands (seconds)",
    )
    imap_inbox: str = Field(default="INBOX", description="Mailbox polled for applications")
    imap_processed_folder: str = Field(
        default="Processed",
        description="Folder for successfully scored application emails",
    )
    imap_failed_folder: str = Field(
        default="Failed",
        description="Folder for application emails that need manual follow-up",
    )

    # SMTP (outbound notifications)
    smtp_host: Optional[str] = Field(default=None, description="SMTP server host")
    smtp_port: int = Field(default=587, description="SMTP server port")
    smtp_user: Optional[str] = Field(default=None, description="SMTP username")
    smtp_password: Optional[str] = Field(default=None, description="SMTP password")
    smtp_use_ssl: bool = Field(
        default=False,
        description="Use implicit TLS instead of STARTTLS (port 465)",
    )
    platform_sender_email: str = Field(
        default="noreply@hirebit.com",
        description="Sender used when a company has no usable address",
    )
    email_log_file: str = Field(
        default="logs/email.log",
        description="Append-only log of every outbound send attempt",
    )

    # Generative scoring
    openai_api_key: Optional[str] = Field(
        default=None,
        description="API key for the OpenAI-compatible scoring service",
    )
    openai_base_url: Optional[str] = Field(
        default=None,
        description="Override base URL (e.g. https://api.groq.com/openai/v1)",
    )
    scoring_model: str = Field(default="gpt-4o", description="Model identifier")
    scoring_timeout_seconds: float = Field(
        default=60.0,
        description="Upper bound for one scoring request before falling back",
    )
    scoring_max_retries: int = Field(
        default=1,
        description="Client-level retries for transient scoring errors",
    )
    scoring_max_resume_chars: int = Field(
        default=50_000,
        description="Resume characters sent to the model before truncation",
    )
    scoring_temperature: float = Field(default=0.3, description="Sampling temperature")
    scoring_system_instruction: Optional[str] = Field(
        default=None,
        description="Replaces the built-in evaluation rubric when set",
    )

    # Storage
    file_storage_dir: Path = Field(
        default=Path("storage"),
        description="Directory where extracted resumes are written",
    )

    # Paths
    config_dir: Path = Field(
        default=Path(__file__).parent,
        description="Configuration directory",
    )

    @property
    def project_root(self) -> Path:
        """Project root directory."""
        return self.config_dir.parent

    @property
    def poll_interval_seconds(self) -> float:
        """Mailbox poll interval in seconds."""
        return max(self.imap_poll_ms, 0) / 1000.0

    def missing_imap_settings(self) -> list[str]:
        """Names of the IMAP settings that must be set before polling."""
        required = {
            "IMAP_HOST": self.imap_host,
            "IMAP_USER": self.imap_user,
            "IMAP_PASSWORD": self.imap_password,
        }
        return [name for name, value in required.items() if not value]


# Global settings instance
settings = Settings()
