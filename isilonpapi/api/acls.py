"""Access control requests on volume directories (``?acl``)."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from isilonpapi.core.http import PapiClient
from isilonpapi.core.params import OrderedValues
from isilonpapi.core.utils import namespace_path

AUTHORITATIVE_ACL = "acl"
AUTHORITATIVE_MODE = "mode"

ACTION_REPLACE = "replace"
ACTION_UPDATE = "update"

PERSONA_ID_USER = "USER"
PERSONA_ID_GROUP = "GROUP"
PERSONA_ID_UID = "UID"
PERSONA_ID_GID = "GID"
PERSONA_ID_SID = "SID"


class FileMode(int):
    """POSIX permission bits; travels as a four-digit octal string."""

    def __str__(self):
        return f"{int(self):04o}"

    def __repr__(self):
        return f"FileMode(0o{int(self):o})"

    @classmethod
    def parse(cls, value: Any) -> "FileMode":
        if isinstance(value, int):
            return cls(value)
        return cls(int(str(value), 8))


@dataclass
class PersonaID:
    id: str
    type: str = PERSONA_ID_USER

    def __str__(self):
        return f"{self.type}:{self.id}"

    @classmethod
    def parse(cls, value: str) -> "PersonaID":
        type_, sep, id_ = value.partition(":")
        if not sep:
            return cls(id=value, type="")
        return cls(id=id_, type=type_)


@dataclass
class Persona:
    """A user or group identity as understood by OneFS."""

    id: Optional[PersonaID] = None
    name: Optional[str] = None
    type: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        body = {}
        if self.id is not None:
            body["id"] = str(self.id)
        if self.name is not None:
            body["name"] = self.name
        if self.type is not None:
            body["type"] = self.type
        return body

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Persona"]:
        if not data:
            return None
        return cls(
            id=PersonaID.parse(data["id"]) if data.get("id") else None,
            name=data.get("name"),
            type=data.get("type"),
        )


@dataclass
class ACL:
    """Ownership, mode and ACE list of a path.

    Only the fields that are set are sent, so an update touches nothing else.
    """

    authoritative: Optional[str] = None
    action: Optional[str] = None
    owner: Optional[Persona] = None
    group: Optional[Persona] = None
    mode: Optional[FileMode] = None
    acl: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if self.authoritative is not None:
            body["authoritative"] = self.authoritative
        if self.action is not None:
            body["action"] = self.action
        if self.owner is not None:
            body["owner"] = self.owner.to_dict()
        if self.group is not None:
            body["group"] = self.group.to_dict()
        if self.mode is not None:
            body["mode"] = str(FileMode(self.mode))
        if self.acl:
            body["acl"] = self.acl
        return body

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ACL":
        mode = data.get("mode")
        return cls(
            authoritative=data.get("authoritative"),
            action=data.get("action"),
            owner=Persona.from_dict(data.get("owner")),
            group=Persona.from_dict(data.get("group")),
            mode=FileMode.parse(mode) if mode is not None else None,
            acl=list(data.get("acl") or []),
        )


def acl_query() -> OrderedValues:
    return OrderedValues([("acl",)])


def acl_inspect(client: PapiClient, name: str) -> ACL:
    # GET /namespace/ifs/volumes/<name>?acl
    resp = client.get(namespace_path(client.volumes_path), name, params=acl_query(), resp_type=ACL)
    return resp if resp is not None else ACL()


def acl_update(client: PapiClient, name: str, acl: ACL) -> None:
    # PUT /namespace/ifs/volumes/<name>?acl
    client.put(namespace_path(client.volumes_path), name, params=acl_query(), body=acl)
