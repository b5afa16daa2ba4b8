"""
Cluster models - snapshot of cluster-wide metadata from ``/pools/default``.
"""

import re
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)")


class NodeInfo(BaseModel):
    """One server node as reported by the cluster"""
    model_config = ConfigDict(frozen=True)

    hostname: str
    version: Optional[str] = None
    status: Optional[str] = None
    cluster_membership: Optional[str] = None
    services: Tuple[str, ...] = ()

    @classmethod
    def from_server(cls, payload: Mapping[str, Any]) -> "NodeInfo":
        if not isinstance(payload, Mapping):
            raise TypeError(f"Node payload must be an object, got {type(payload).__name__}")
        return cls(
            hostname=payload["hostname"],
            version=payload.get("version"),
            status=payload.get("status"),
            cluster_membership=payload.get("clusterMembership"),
            services=tuple(payload.get("services", ())),
        )

    @property
    def version_tuple(self) -> Optional[Tuple[int, int, int]]:
        """Numeric version, e.g. ``(7, 2, 0)`` for ``7.2.0-5325-enterprise``"""
        if not self.version:
            return None
        match = _VERSION_PATTERN.match(self.version)
        if not match:
            return None
        return int(match.group(1)), int(match.group(2)), int(match.group(3))


class ClusterInfo(BaseModel):
    """Immutable snapshot of cluster metadata taken when it was fetched"""
    model_config = ConfigDict(frozen=True)

    nodes: Tuple[NodeInfo, ...] = ()
    storage_totals: Dict[str, Any] = Field(default_factory=dict)
    raw: Dict[str, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_server(cls, payload: Mapping[str, Any]) -> "ClusterInfo":
        if not isinstance(payload, Mapping):
            raise TypeError(f"Cluster payload must be an object, got {type(payload).__name__}")
        return cls(
            nodes=tuple(NodeInfo.from_server(node) for node in payload.get("nodes", ())),
            storage_totals=dict(payload.get("storageTotals") or {}),
            raw=dict(payload),
        )

    @property
    def min_version(self) -> Optional[Tuple[int, int, int]]:
        """Lowest version among the nodes; features must be available on all of them"""
        versions = [node.version_tuple for node in self.nodes if node.version_tuple]
        return min(versions) if versions else None

    def is_version_at_least(self, major: int, minor: int = 0, patch: int = 0) -> bool:
        version = self.min_version
        return version is not None and version >= (major, minor, patch)
