"""URL and path helpers for the Platform API client."""
import posixpath
from typing import Optional

from isilonpapi.const import NAMESPACE_PATH
from isilonpapi.core.params import OrderedValues


def build_url(hostname: str, path: str = "", id: str = "", params: Optional[OrderedValues] = None) -> str:
    """Assemble ``hostname/path/id?params``.

    Exactly one slash separates the hostname from the path and the path from
    the id, whether or not the inputs already carry leading or trailing
    slashes. A non-empty path always ends with a slash, which is how OneFS
    addresses collections.
    """
    url = hostname
    if path or id:
        if not hostname.endswith("/"):
            url += "/"
    if path:
        url += path.lstrip("/")
        if not url.endswith("/"):
            url += "/"
    if id:
        url += id.lstrip("/")
    if params:
        url += "?" + params.encode()
    return url


def join_path(*parts: str) -> str:
    """Join path components the way ``path.Join`` does on the appliance side."""
    parts = [p for p in parts if p]
    if not parts:
        return ""
    return posixpath.normpath(posixpath.join(*parts))


def volume_path(volumes_path: str, name: str) -> str:
    """Return the absolute appliance path of a volume."""
    return join_path(volumes_path, name)


def namespace_path(volumes_path: str) -> str:
    """Return the namespace endpoint holding the volumes directory."""
    return join_path(NAMESPACE_PATH, volumes_path.lstrip("/"))
