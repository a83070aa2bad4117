"""Snapshot requests (``platform/1/snapshot/snapshots``)."""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from isilonpapi.const import HEADER_COPY_SOURCE, NAMESPACE_PATH, SNAPSHOT_DIR, SNAPSHOTS_PATH
from isilonpapi.core.http import PapiClient
from isilonpapi.core.params import OrderedValues
from isilonpapi.core.utils import join_path, namespace_path
from isilonpapi.exceptions import SnapshotNotFoundError


@dataclass
class Snapshot:
    """A read-only point-in-time copy of a directory tree."""

    id: int
    name: str
    path: str
    created: Optional[int] = None
    expires: Optional[int] = None
    size: int = 0
    state: str = ""
    has_locks: bool = False
    alias: Optional[str] = None
    schedule: Optional[str] = None
    target_id: Optional[int] = None
    target_name: Optional[str] = None
    shadow_bytes: int = 0
    pct_filesystem: float = 0.0
    pct_reserve: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        return cls(
            id=int(data.get("id") or 0),
            name=data.get("name") or "",
            path=data.get("path") or "",
            created=data.get("created"),
            expires=data.get("expires"),
            size=data.get("size") or 0,
            state=data.get("state") or "",
            has_locks=bool(data.get("has_locks")),
            alias=data.get("alias"),
            schedule=data.get("schedule"),
            target_id=data.get("target_id"),
            target_name=data.get("target_name"),
            shadow_bytes=data.get("shadow_bytes") or 0,
            pct_filesystem=data.get("pct_filesystem") or 0.0,
            pct_reserve=data.get("pct_reserve") or 0.0,
        )


@dataclass
class _SnapshotPage:
    snapshots: List[Snapshot]
    resume: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "_SnapshotPage":
        return cls(
            snapshots=[Snapshot.from_dict(s) for s in data.get("snapshots") or []],
            resume=data.get("resume"),
        )


@dataclass
class CreateSnapshotRequest:
    name: str
    path: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "path": self.path}


def snapshot_namespace_path(volumes_path: str, snapshot_name: str) -> str:
    """Namespace path of the volumes directory as seen inside a snapshot.

    ``/ifs/volumes`` in snapshot ``snap`` is ``/namespace/ifs/.snapshot/snap/volumes``.
    """
    root, _, rest = volumes_path.strip("/").partition("/")
    return join_path("/", NAMESPACE_PATH, root, SNAPSHOT_DIR, snapshot_name, rest)


def get_isi_snapshots(client: PapiClient) -> List[Snapshot]:
    """Return every snapshot on the cluster, following ``resume`` tokens."""
    snapshots: List[Snapshot] = []
    params = None
    while True:
        page = client.get(SNAPSHOTS_PATH, params=params, resp_type=_SnapshotPage)
        if page is None:
            break
        snapshots.extend(page.snapshots)
        if not page.resume:
            break
        params = OrderedValues([("resume", page.resume)])
    return snapshots


def get_isi_snapshot(client: PapiClient, snapshot_id: int) -> Snapshot:
    # GET /platform/1/snapshot/snapshots/<id>
    page = client.get(SNAPSHOTS_PATH, str(snapshot_id), resp_type=_SnapshotPage)
    if page is None or not page.snapshots:
        raise SnapshotNotFoundError(snapshot_id)
    return page.snapshots[0]


def create_isi_snapshot(client: PapiClient, path: str, name: str) -> Optional[Snapshot]:
    # POST /platform/1/snapshot/snapshots {"name": ..., "path": ...}
    return client.post(SNAPSHOTS_PATH, body=CreateSnapshotRequest(name=name, path=path), resp_type=Snapshot)


def remove_isi_snapshot(client: PapiClient, snapshot_id: int) -> None:
    client.delete(SNAPSHOTS_PATH, str(snapshot_id))


def copy_isi_snapshot(client: PapiClient, snapshot_name: str, source_volume: str,
                      destination_name: str) -> None:
    """Copy a volume out of a snapshot into a new volume."""
    # PUT /namespace/ifs/volumes/<destination>
    #     x-isi-ifs-copy-source: /namespace/ifs/.snapshot/<snapshot>/volumes/<source>
    source = join_path(snapshot_namespace_path(client.volumes_path, snapshot_name), source_volume)
    client.put(
        namespace_path(client.volumes_path),
        destination_name,
        headers={HEADER_COPY_SOURCE: source},
    )
