"""
Configuration module using Pydantic Settings.

Reads from .env file and environment variables.
All fields are optional with sensible defaults.

Structure is flat; grouped views are exposed through helper properties.
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from clustermgr.config.cluster_config import ClusterSettings
from clustermgr.config.logging_config import LoggingSettings


class Settings(BaseSettings):
    """Main application settings - flat structure"""
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Ignore extra fields
    )

    # ========================================================================
    # LOGGING
    # ========================================================================
    log_level: str = Field(default="INFO", description="Logging level")
    log_enable_debug: bool = Field(default=False, description="Enable debug logging")
    log_file: Optional[str] = Field(default=None, description="Log file path")

    # ========================================================================
    # CLUSTER
    # ========================================================================
    cluster_connector: str = Field(
        default="couchbase-rest",
        description="Registered connector used to reach the cluster"
    )
    cluster_host: str = Field(
        default="127.0.0.1",
        description="Cluster node hostname"
    )
    cluster_port: int = Field(
        default=8091,
        description="Management REST port"
    )
    cluster_username: str = Field(
        default="Administrator",
        description="Administrator username"
    )
    cluster_password: Optional[str] = Field(
        default=None,
        description="Administrator password"
    )
    cluster_use_ssl: bool = Field(
        default=False,
        description="Use HTTPS"
    )
    cluster_verify_ssl: bool = Field(
        default=True,
        description="Verify SSL certificates"
    )
    cluster_connect_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Connect timeout in seconds"
    )
    cluster_request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-request transport timeout in seconds"
    )
    cluster_management_timeout: float = Field(
        default=75.0,
        gt=0,
        description="Default deadline of blocking management calls in seconds"
    )
    cluster_max_connections: int = Field(
        default=10,
        gt=0,
        description="Max HTTP connections"
    )

    # ========================================================================
    # HELPER PROPERTIES
    # ========================================================================

    @property
    def cluster(self) -> ClusterSettings:
        """Cluster settings view"""
        return ClusterSettings(
            connector=self.cluster_connector,
            host=self.cluster_host,
            port=self.cluster_port,
            username=self.cluster_username,
            password=self.cluster_password,
            use_ssl=self.cluster_use_ssl,
            verify_ssl=self.cluster_verify_ssl,
            connect_timeout=self.cluster_connect_timeout,
            request_timeout=self.cluster_request_timeout,
            management_timeout=self.cluster_management_timeout,
            max_connections=self.cluster_max_connections,
        )

    @property
    def log(self) -> LoggingSettings:
        """Logging settings view"""
        return LoggingSettings(
            level=self.log_level,
            enable_debug=self.log_enable_debug,
            file=self.log_file,
        )


# ============================================================================
# SINGLETON INSTANCE
# ============================================================================

_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get global settings instance (singleton)"""
    global _settings_instance

    if _settings_instance is None:
        _settings_instance = Settings()

    return _settings_instance


def reset_settings() -> None:
    """Reset settings instance (for testing)"""
    global _settings_instance
    _settings_instance = None
