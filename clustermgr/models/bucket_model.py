"""
Bucket models - settings of a single bucket as sent to and read from the cluster.
"""

from enum import Enum
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field

MEGABYTE = 1024 * 1024


class BucketType(str, Enum):
    """Storage flavour of a bucket"""
    COUCHBASE = "couchbase"
    MEMCACHED = "memcached"
    EPHEMERAL = "ephemeral"

    @property
    def server_name(self) -> str:
        """Name used by the REST API (persistent buckets are still called membase there)"""
        if self is BucketType.COUCHBASE:
            return "membase"
        return self.value

    @classmethod
    def from_server(cls, value: str) -> "BucketType":
        if value == "membase":
            return cls.COUCHBASE
        return cls(value)


class BucketSettings(BaseModel):
    """
    Immutable description of one bucket.

    Identity is the name. Updates are expressed by building a new value
    (``settings.model_copy(update={...})``) and passing it to update_bucket.
    ``raw`` holds the server payload a value was decoded from and takes no
    part in equality.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Bucket name")
    type: BucketType = Field(default=BucketType.COUCHBASE, description="Bucket type")
    quota: int = Field(default=100, gt=0, description="RAM quota in MB")
    port: int = Field(default=0, ge=0, description="Dedicated proxy port, 0 for SASL auth")
    password: str = Field(default="", description="SASL password")
    replicas: int = Field(default=0, ge=0, le=3, description="Number of replicas")
    index_replicas: bool = Field(default=False, description="Replicate view indexes")
    enable_flush: bool = Field(default=False, description="Allow flushing the bucket")
    custom_settings: Dict[str, Any] = Field(
        default_factory=dict,
        description="Extra REST parameters sent verbatim"
    )
    raw: Dict[str, Any] = Field(default_factory=dict, repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BucketSettings):
            return NotImplemented
        return self.model_dump(exclude={"raw"}) == other.model_dump(exclude={"raw"})

    def __hash__(self) -> int:
        return hash(self.name)

    @classmethod
    def from_server(cls, payload: Mapping[str, Any]) -> "BucketSettings":
        """
        Rebuild settings from a bucket entry of ``/pools/default/buckets``.

        Raises:
            ValueError, KeyError, TypeError: If the payload does not have the expected shape
        """
        if not isinstance(payload, Mapping):
            raise TypeError(f"Bucket payload must be an object, got {type(payload).__name__}")

        quota = payload.get("quota") or {}
        if not isinstance(quota, Mapping):
            raise TypeError(f"Bucket quota must be an object, got {type(quota).__name__}")
        raw_ram = quota.get("rawRAM", quota.get("ram", 0))
        controllers = payload.get("controllers") or {}

        return cls(
            name=payload["name"],
            type=BucketType.from_server(payload.get("bucketType", "membase")),
            quota=int(raw_ram) // MEGABYTE,
            port=payload.get("proxyPort", 0),
            password=payload.get("saslPassword", ""),
            replicas=payload.get("replicaNumber", 0),
            index_replicas=bool(payload.get("replicaIndex", False)),
            enable_flush="flush" in controllers,
            raw=dict(payload),
        )

    def to_form(self, update: bool = False) -> Dict[str, str]:
        """
        Encode as the form body of a create (or, with ``update=True``, edit) request.

        Name and type cannot change after creation, so they are left out of updates.
        """
        form: Dict[str, str] = {
            "ramQuotaMB": str(self.quota),
            "flushEnabled": "1" if self.enable_flush else "0",
        }
        if not update:
            form["name"] = self.name
            form["bucketType"] = self.type.server_name

        if self.type is not BucketType.MEMCACHED:
            form["replicaNumber"] = str(self.replicas)
        if self.type is BucketType.COUCHBASE:
            form["replicaIndex"] = "1" if self.index_replicas else "0"

        if self.port:
            form["authType"] = "none"
            form["proxyPort"] = str(self.port)
        else:
            form["authType"] = "sasl"
            form["saslPassword"] = self.password

        for key, value in self.custom_settings.items():
            form[key] = str(value)
        return form
