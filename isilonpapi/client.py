"""High-level client for managing volumes on a OneFS cluster."""
import logging
import posixpath
from typing import BinaryIO, List, Mapping, Optional

import httpx

from isilonpapi.api import acls, quotas, snapshots, volumes
from isilonpapi.api.acls import ACL, FileMode, Persona, PersonaID
from isilonpapi.api.quotas import Quota
from isilonpapi.api.snapshots import Snapshot
from isilonpapi.api.volumes import Volume
from isilonpapi.config import Settings
from isilonpapi.core.http import ClientOptions, PapiClient
from isilonpapi.exceptions import IsilonError, PapiError, SnapshotNotFoundError

log = logging.getLogger("isilonpapi")


class IsilonClient:
    """
    Volume, quota, snapshot and ACL management for one cluster.

    Volume names are relative to the configured volumes path
    (``/ifs/volumes`` unless overridden).

    Args:
        endpoint (str): Base URL of the cluster, e.g. ``https://10.0.0.1:8080``.
        username (str): API user.
        password (str): API password.
        group (str): Group that newly created volumes are assigned to.
        volumes_path (str): Directory holding volumes.
        insecure (bool): Skip TLS certificate verification.
        timeout (Optional[float]): Overall request timeout in seconds.
        transport (Optional[httpx.BaseTransport]): Custom transport.
        logger (Optional[logging.Logger]): Receives request/response dumps.
    """

    def __init__(
        self,
        endpoint: str,
        username: str,
        password: str,
        group: str = "",
        volumes_path: str = "",
        insecure: bool = False,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.api = PapiClient(
            endpoint,
            username,
            password,
            group,
            ClientOptions(
                insecure=insecure,
                volumes_path=volumes_path,
                timeout=timeout,
                transport=transport,
                logger=logger,
            ),
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "IsilonClient":
        return cls(
            settings.endpoint,
            settings.username,
            settings.password,
            group=settings.group,
            volumes_path=settings.volumes_path,
            insecure=settings.insecure,
            timeout=settings.timeout,
            **kwargs,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **kwargs) -> "IsilonClient":
        """Build a client from the ``ISILON_*`` environment variables."""
        return cls.from_settings(Settings.from_env(environ), **kwargs)

    def close(self):
        self.api.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def api_version(self) -> int:
        return self.api.api_version

    def volume_path(self, name: str) -> str:
        return self.api.volume_path(name)

    # Volumes

    def get_volumes(self) -> List[Volume]:
        return [Volume(name=name) for name in volumes.get_isi_volumes(self.api)]

    def get_volume(self, id: str = "", name: str = "") -> Volume:
        """Fetch a volume with its attributes; ``id`` wins over ``name``."""
        return volumes.get_isi_volume(self.api, id or name)

    def volume_exists(self, name: str) -> bool:
        try:
            self.get_volume(name=name)
        except PapiError as e:
            if e.status_code == 404:
                return False
            raise
        return True

    def create_volume(self, name: str) -> Volume:
        volumes.create_isi_volume(self.api, name)
        return Volume(name=name)

    def create_volume_with_acl(self, name: str, acl: str) -> Volume:
        volumes.create_isi_volume_with_acl(self.api, name, acl)
        return Volume(name=name)

    def delete_volume(self, name: str) -> None:
        volumes.delete_isi_volume(self.api, name)

    def copy_volume(self, source_name: str, destination_name: str) -> Volume:
        volumes.copy_isi_volume(self.api, source_name, destination_name)
        return self.get_volume(name=destination_name)

    def upload_object(self, volume_name: str, object_name: str, stream: BinaryIO,
                      content_type: Optional[str] = None) -> None:
        """Stream a file into ``volume_name/object_name``."""
        volumes.put_isi_object(self.api, volume_name, object_name, stream, content_type)

    # ACLs

    def get_volume_acl(self, name: str) -> ACL:
        return acls.acl_inspect(self.api, name)

    def set_volume_owner_to_current_user(self, name: str) -> None:
        self.set_volume_owner(name, self.api.user)

    def set_volume_owner(self, name: str, user_name: str) -> None:
        acls.acl_update(
            self.api,
            name,
            ACL(
                action=acls.ACTION_REPLACE,
                authoritative=acls.AUTHORITATIVE_MODE,
                owner=Persona(id=PersonaID(user_name, acls.PERSONA_ID_USER)),
                mode=FileMode(0o777),
            ),
        )

    def set_volume_mode(self, name: str, mode: int) -> None:
        """chmod a volume."""
        acls.acl_update(
            self.api,
            name,
            ACL(
                action=acls.ACTION_REPLACE,
                authoritative=acls.AUTHORITATIVE_MODE,
                mode=FileMode(mode),
            ),
        )

    # Quotas

    def get_quota(self, name: str) -> Quota:
        return quotas.get_isi_quota(self.api, self.volume_path(name))

    def create_quota(self, name: str, container: bool, size: int) -> None:
        """Create a hard directory quota of ``size`` bytes on a volume."""
        quotas.create_isi_quota(self.api, self.volume_path(name), container, size)

    def set_quota_size(self, name: str, size: int) -> None:
        quotas.set_isi_quota_hard_threshold(self.api, self.volume_path(name), size)

    def update_quota_size(self, name: str, size: int) -> None:
        quotas.update_isi_quota_hard_threshold(self.api, self.volume_path(name), size)

    def clear_quota(self, name: str) -> None:
        quotas.delete_isi_quota(self.api, self.volume_path(name))

    # Snapshots

    def get_snapshots(self) -> List[Snapshot]:
        return snapshots.get_isi_snapshots(self.api)

    def get_snapshots_by_path(self, name: str) -> List[Snapshot]:
        """Snapshots taken of the volume ``name``."""
        path = self.volume_path(name)
        return [s for s in self.get_snapshots() if s.path == path]

    def get_snapshot(self, id: Optional[int] = None, name: str = "") -> Optional[Snapshot]:
        """Find a snapshot by id, falling back to a scan by name.

        Returns None when the name scan finds nothing. If the id lookup fails
        and no name is given, the id lookup error is raised as-is.
        """
        if id is not None:
            try:
                return snapshots.get_isi_snapshot(self.api, id)
            except IsilonError:
                if not name:
                    raise
                log.debug("snapshot %s not found by id, scanning for %r", id, name)
        elif not name:
            raise SnapshotNotFoundError(id, name)

        for snapshot in self.get_snapshots():
            if snapshot.name == name:
                return snapshot
        return None

    def create_snapshot(self, name: str, snapshot_name: str) -> Optional[Snapshot]:
        """Snapshot the volume ``name``."""
        return snapshots.create_isi_snapshot(self.api, self.volume_path(name), snapshot_name)

    def remove_snapshot(self, id: Optional[int] = None, name: str = "") -> None:
        snapshot = self.get_snapshot(id, name)
        if snapshot is None:
            raise SnapshotNotFoundError(id, name)
        snapshots.remove_isi_snapshot(self.api, snapshot.id)

    def copy_snapshot(self, source_id: Optional[int], source_name: str, destination_name: str) -> Volume:
        """Copy the volume captured by a snapshot into a new volume."""
        snapshot = self.get_snapshot(source_id, source_name)
        if snapshot is None:
            raise SnapshotNotFoundError(source_id, source_name)
        snapshots.copy_isi_snapshot(
            self.api, snapshot.name, posixpath.basename(snapshot.path), destination_name)
        return self.get_volume(name=destination_name)
