"""Volume requests against the OneFS namespace API.

A volume is a directory under the client's volumes path; the namespace API
addresses it as ``namespace/<volumes path>/<name>``.
"""
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, List, Optional

from isilonpapi.api.acls import acl_query
from isilonpapi.const import (
    DEFAULT_VOLUME_ACL,
    HEADER_ACCESS_CONTROL,
    HEADER_COPY_SOURCE,
    HEADER_TARGET_TYPE,
)
from isilonpapi.core.http import PapiClient
from isilonpapi.core.params import OrderedValues
from isilonpapi.core.utils import join_path, namespace_path


def metadata_query() -> OrderedValues:
    return OrderedValues([("metadata",)])


def recursive_query() -> OrderedValues:
    return OrderedValues([("recursive", "true")])


@dataclass
class Volume:
    """A directory exposed as a volume."""

    name: str
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class _Children:
    names: List[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "_Children":
        return cls([c["name"] for c in data.get("children") or [] if c.get("name")])


@dataclass
class _Attributes:
    attrs: Dict[str, Any]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "_Attributes":
        return cls({a["name"]: a.get("value") for a in data.get("attrs") or [] if "name" in a})


@dataclass
class Ownership:
    name: str
    type: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type}


@dataclass
class OwnershipRequest:
    """Body of the ``?acl`` update that hands a new volume to the API user."""

    owner: Ownership
    group: Optional[Ownership] = None
    authoritative: str = "acl"
    action: str = "update"

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "authoritative": self.authoritative,
            "action": self.action,
            "owner": self.owner.to_dict(),
        }
        if self.group is not None:
            body["group"] = self.group.to_dict()
        return body


def real_namespace_path(client: PapiClient) -> str:
    return namespace_path(client.volumes_path)


def get_isi_volumes(client: PapiClient) -> List[str]:
    """List the names of all volumes."""
    # GET /namespace/ifs/volumes/
    resp = client.get(real_namespace_path(client), resp_type=_Children)
    return resp.names if resp else []


def create_isi_volume(client: PapiClient, name: str) -> None:
    create_isi_volume_with_acl(client, name, DEFAULT_VOLUME_ACL)


def create_isi_volume_with_acl(client: PapiClient, name: str, acl: str) -> None:
    """Create a volume, then hand its ownership to the API user.

    Two requests; if the ownership update fails the directory stays behind.
    """
    # PUT /namespace/ifs/volumes/<name>
    #     x-isi-ifs-target-type: container
    #     x-isi-ifs-access-control: <acl>
    client.put(
        real_namespace_path(client),
        name,
        headers={HEADER_TARGET_TYPE: "container", HEADER_ACCESS_CONTROL: acl},
    )

    data = OwnershipRequest(owner=Ownership(client.user, "user"))
    if client.group:
        data.group = Ownership(client.group, "group")

    # PUT /namespace/ifs/volumes/<name>?acl
    client.put(real_namespace_path(client), name, params=acl_query(), body=data)


def get_isi_volume(client: PapiClient, name: str) -> Volume:
    """Fetch a volume together with its metadata attributes."""
    # GET /namespace/ifs/volumes/<name>?metadata
    resp = client.get(real_namespace_path(client), name, params=metadata_query(), resp_type=_Attributes)
    return Volume(name=name, attributes=resp.attrs if resp else {})


def delete_isi_volume(client: PapiClient, name: str) -> None:
    client.delete(real_namespace_path(client), name, params=recursive_query())


def copy_isi_volume(client: PapiClient, source_name: str, destination_name: str) -> None:
    # PUT /namespace/ifs/volumes/<destination>
    #     x-isi-ifs-copy-source: /namespace/ifs/volumes/<source>
    source = join_path("/", real_namespace_path(client), source_name)
    client.put(real_namespace_path(client), destination_name, headers={HEADER_COPY_SOURCE: source})


def put_isi_object(client: PapiClient, volume_name: str, object_name: str,
                   stream: BinaryIO, content_type: Optional[str] = None) -> None:
    """Upload a file into a volume, streaming its bytes as-is."""
    headers = {HEADER_TARGET_TYPE: "object"}
    if content_type:
        headers["Content-Type"] = content_type
    client.put(
        real_namespace_path(client),
        join_path(volume_name, object_name),
        headers=headers,
        body=stream,
    )
