"""
Cluster Configuration Module
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClusterSettings(BaseSettings):
    """Cluster management endpoint and timeout settings"""
    model_config = SettingsConfigDict(env_prefix="CLUSTER_", extra="ignore")

    connector: str = Field(
        default="couchbase-rest",
        description="Registered connector used to reach the cluster"
    )
    host: str = Field(
        default="127.0.0.1",
        description="Cluster node hostname"
    )
    port: int = Field(
        default=8091,
        description="Management REST port"
    )
    username: str = Field(
        default="Administrator",
        description="Administrator username"
    )
    password: Optional[str] = Field(
        default=None,
        description="Administrator password"
    )
    use_ssl: bool = Field(
        default=False,
        description="Use HTTPS"
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify SSL certificates"
    )
    connect_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Connect timeout in seconds"
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-request transport timeout in seconds"
    )
    management_timeout: float = Field(
        default=75.0,
        gt=0,
        description="Default deadline of blocking management calls in seconds"
    )
    max_connections: int = Field(
        default=10,
        gt=0,
        description="Max HTTP connections"
    )
