"""Directory quota requests (``platform/1/quota/quotas``)."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from isilonpapi.const import QUOTA_PATH
from isilonpapi.core.http import PapiClient
from isilonpapi.core.params import OrderedValues
from isilonpapi.exceptions import QuotaNotFoundError


def _path_query(path: str) -> OrderedValues:
    return OrderedValues([("path", path)])


@dataclass
class QuotaThresholds:
    advisory: Optional[int] = None
    soft: Optional[int] = None
    hard: Optional[int] = None
    advisory_exceeded: bool = False
    soft_exceeded: bool = False
    hard_exceeded: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "QuotaThresholds":
        data = data or {}
        return cls(
            advisory=data.get("advisory"),
            soft=data.get("soft"),
            hard=data.get("hard"),
            advisory_exceeded=bool(data.get("advisory_exceeded")),
            soft_exceeded=bool(data.get("soft_exceeded")),
            hard_exceeded=bool(data.get("hard_exceeded")),
        )

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {"advisory": self.advisory, "hard": self.hard, "soft": self.soft}


@dataclass
class QuotaUsage:
    inodes: int = 0
    logical: int = 0
    physical: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "QuotaUsage":
        data = data or {}
        return cls(
            inodes=data.get("inodes") or 0,
            logical=data.get("logical") or 0,
            physical=data.get("physical") or 0,
        )


@dataclass
class Quota:
    """A quota as reported by the appliance."""

    id: str
    path: str
    type: str = "directory"
    enforced: bool = False
    container: bool = False
    include_snapshots: bool = False
    thresholds_include_overhead: bool = False
    thresholds: QuotaThresholds = field(default_factory=QuotaThresholds)
    usage: QuotaUsage = field(default_factory=QuotaUsage)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quota":
        return cls(
            id=data.get("id") or "",
            path=data.get("path") or "",
            type=data.get("type") or "directory",
            enforced=bool(data.get("enforced")),
            container=bool(data.get("container")),
            include_snapshots=bool(data.get("include_snapshots")),
            thresholds_include_overhead=bool(data.get("thresholds_include_overhead")),
            thresholds=QuotaThresholds.from_dict(data.get("thresholds")),
            usage=QuotaUsage.from_dict(data.get("usage")),
        )


@dataclass
class _QuotaList:
    quotas: List[Quota]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "_QuotaList":
        return cls([Quota.from_dict(q) for q in data.get("quotas") or []])


@dataclass
class CreateQuotaRequest:
    path: str
    thresholds: QuotaThresholds
    container: bool = False
    enforced: bool = True
    include_snapshots: bool = False
    thresholds_include_overhead: bool = False
    type: str = "directory"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enforced": self.enforced,
            "include_snapshots": self.include_snapshots,
            "path": self.path,
            "container": self.container,
            "thresholds_include_overhead": self.thresholds_include_overhead,
            "type": self.type,
            "thresholds": self.thresholds.to_dict(),
        }


@dataclass
class UpdateQuotaRequest:
    thresholds: QuotaThresholds
    enforced: bool = True
    thresholds_include_overhead: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enforced": self.enforced,
            "thresholds_include_overhead": self.thresholds_include_overhead,
            "thresholds": self.thresholds.to_dict(),
        }


def get_isi_quota(client: PapiClient, path: str) -> Quota:
    """Return the quota set exactly on ``path``.

    The appliance filters by path prefix, so the listing is scanned for an
    exact match.
    """
    # GET /platform/1/quota/quotas?path=<path>
    resp = client.get(QUOTA_PATH, params=_path_query(path), resp_type=_QuotaList)
    for quota in resp.quotas if resp else []:
        if quota.path == path:
            return quota
    raise QuotaNotFoundError(path)


def create_isi_quota(client: PapiClient, path: str, container: bool, size: int) -> None:
    """Create an enforced hard directory quota of ``size`` bytes on ``path``."""
    # POST /platform/1/quota/quotas
    data = CreateQuotaRequest(
        path=path,
        container=container,
        thresholds=QuotaThresholds(hard=size),
    )
    client.post(QUOTA_PATH, body=data)


def set_isi_quota_hard_threshold(client: PapiClient, path: str, size: int) -> None:
    create_isi_quota(client, path, False, size)


def update_isi_quota_hard_threshold(client: PapiClient, path: str, size: int) -> None:
    """Change the hard threshold of the quota already set on ``path``."""
    quota = get_isi_quota(client, path)
    # PUT /platform/1/quota/quotas/<id>
    data = UpdateQuotaRequest(thresholds=QuotaThresholds(hard=size))
    client.put(QUOTA_PATH, quota.id, body=data)


def delete_isi_quota(client: PapiClient, path: str) -> None:
    # DELETE /platform/1/quota/quotas?path=<path>
    client.delete(QUOTA_PATH, params=_path_query(path))
