from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env into os.environ
load_dotenv()


class Settings(BaseSettings):
    """Application configuration settings backed by environment variables."""

    rpc_timeout_sec: float = Field(
        default=30.0,
        validation_alias="ODOOTOOLS_RPC_TIMEOUT_SEC",
        description="HTTP timeout in seconds for a single JSON-RPC round trip."
    )
    verify_ssl: bool = Field(
        default=True,
        validation_alias="ODOOTOOLS_VERIFY_SSL",
        description="Verify TLS certificates of the remote Odoo server."
    )

    poll_interval_ms: int = Field(
        default=2000,
        validation_alias="ODOOTOOLS_POLL_INTERVAL_MS",
        description="Delay between two reads of the result/error parameters."
    )
    default_statement_timeout_ms: int = Field(
        default=60000,
        validation_alias="ODOOTOOLS_STATEMENT_TIMEOUT_MS",
        description="Deadline for a statement run when the caller does not give one."
    )

    result_key_prefix: str = Field(
        default="odootools.sql_runner.result",
        validation_alias="ODOOTOOLS_RESULT_KEY_PREFIX",
    )
    error_key_prefix: str = Field(
        default="odootools.sql_runner.error",
        validation_alias="ODOOTOOLS_ERROR_KEY_PREFIX",
    )
    savepoint_prefix: str = Field(
        default="odootools_sql_",
        validation_alias="ODOOTOOLS_SAVEPOINT_PREFIX",
        description="Prefix of the savepoint name; must be a valid SQL identifier."
    )
    job_name_prefix: str = Field(
        default="SQL Runner",
        validation_alias="ODOOTOOLS_JOB_NAME_PREFIX",
    )
    cron_legacy_fields: bool = Field(
        default=True,
        validation_alias="ODOOTOOLS_CRON_LEGACY_FIELDS",
        description="Send numbercall/doall on job creation (Odoo 16 and older)."
    )

    log_level: str = Field(default="INFO", validation_alias="ODOOTOOLS_LOG_LEVEL")
    log_json: bool = Field(
        default=False,
        validation_alias="ODOOTOOLS_LOG_JSON",
        description="Emit log records as JSON lines."
    )

    api_cors_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        validation_alias="ODOOTOOLS_API_CORS_ORIGINS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def configure_env(self, env: str) -> None:
        """Loads environment-specific variables and reloads settings."""
        if not env:
            return

        load_dotenv(f".env.{env}", override=True)
        new_settings = Settings()
        self.__dict__.update(new_settings.__dict__)

settings = Settings()

# Configure logging during import
from odootools.common.logger import configure_logging
configure_logging(
    level=settings.log_level,
    json_format=settings.log_json
)
