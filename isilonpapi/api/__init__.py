"""Request builders for the OneFS Platform API resources."""
from isilonpapi.api.acls import ACL, FileMode, Persona, PersonaID
from isilonpapi.api.quotas import Quota, QuotaThresholds, QuotaUsage
from isilonpapi.api.snapshots import Snapshot
from isilonpapi.api.volumes import Volume

__all__ = [
    "ACL",
    "FileMode",
    "Persona",
    "PersonaID",
    "Quota",
    "QuotaThresholds",
    "QuotaUsage",
    "Snapshot",
    "Volume",
]
