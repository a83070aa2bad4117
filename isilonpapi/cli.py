"""Console script for isilonpapi."""
import functools
import logging
import os
from dataclasses import replace

import click
import httpx
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from isilonpapi.client import IsilonClient
from isilonpapi.config import DEFAULT_CONFIG_PATH, Settings, parse_timeout
from isilonpapi.const import (
    ENV_CONFIG,
    ENV_DEBUG,
    ENV_ENDPOINT,
    ENV_GROUP,
    ENV_INSECURE,
    ENV_PASSWORD,
    ENV_PROFILE,
    ENV_TIMEOUT,
    ENV_USERNAME,
    ENV_VOLUMES_PATH,
)
from isilonpapi.exceptions import IsilonError, PapiError

cli_theme = Theme({
    "brand": "#0076CE",
    "brand.bright": "#2563EB",
    "text": "default",
    "text.muted": "#666666",
    "success": "#10B981",
    "error": "#F59E0B",
})

console = Console(theme=cli_theme)


class State:
    """Per-invocation settings plus a lazily connected client."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client = None

    @property
    def client(self) -> IsilonClient:
        if self._client is None:
            self._client = IsilonClient.from_settings(self.settings)
        return self._client

    def close(self):
        if self._client is not None:
            self._client.close()


def print_error(message: str):
    console.print(Panel(
        f"[error]✗ {message}[/error]",
        title="[error]Error[/error]",
        border_style="error",
        box=box.ROUNDED,
    ))


def handle_errors(f):
    """Render library and transport errors as a panel and exit non-zero."""
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except PapiError as e:
            print_error(f"{e.message} (HTTP {e.status_code})")
            raise click.Abort()
        except IsilonError as e:
            print_error(str(e))
            raise click.Abort()
        except httpx.HTTPError as e:
            print_error(f"request failed: {e}")
            raise click.Abort()
    return wrapper


def _resolve_settings(config, profile, **options) -> Settings:
    settings = Settings()
    if config is None and os.path.exists(DEFAULT_CONFIG_PATH):
        config = DEFAULT_CONFIG_PATH
    if config is not None:
        settings = Settings.from_file(config, profile)
    options["timeout"] = parse_timeout(options.get("timeout"))
    # flags given on the command line win, including an explicit --secure or --no-debug
    return replace(settings, **{k: v for k, v in options.items() if v is not None})


def _setup_logging(debug: bool):
    if not debug:
        return
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logger = logging.getLogger("isilonpapi")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


@click.group()
@click.option("--endpoint", envvar=ENV_ENDPOINT, help="Cluster URL, e.g. https://10.0.0.1:8080")
@click.option("--username", envvar=ENV_USERNAME, help="API user")
@click.option("--password", envvar=ENV_PASSWORD, help="API password")
@click.option("--group", envvar=ENV_GROUP, help="Group assigned to new volumes")
@click.option("--volumes-path", envvar=ENV_VOLUMES_PATH, help="Directory holding volumes (default /ifs/volumes)")
@click.option("--insecure/--secure", envvar=ENV_INSECURE, default=None, help="Skip TLS certificate verification")
@click.option("--timeout", envvar=ENV_TIMEOUT, help="Request timeout, e.g. 30, 30s, 5m")
@click.option("--config", "config", envvar=ENV_CONFIG, type=click.Path(dir_okay=False),
              help="YAML file of connection profiles")
@click.option("--profile", envvar=ENV_PROFILE, default="default", show_default=True,
              help="Profile to read from the config file")
@click.option("--debug/--no-debug", envvar=ENV_DEBUG, default=None, help="Log every request and response")
@click.pass_context
@handle_errors
def cli(ctx, endpoint, username, password, group, volumes_path, insecure, timeout, config, profile, debug):
    """isilon - manage volumes, quotas, snapshots and ACLs on a OneFS cluster."""
    settings = _resolve_settings(
        config,
        profile,
        endpoint=endpoint,
        username=username,
        password=password,
        group=group,
        volumes_path=volumes_path,
        insecure=insecure,
        timeout=timeout,
        debug=debug,
    )
    _setup_logging(settings.debug)
    state = State(settings)
    ctx.obj = state
    ctx.call_on_close(state.close)


@cli.command()
@click.pass_obj
@handle_errors
def status(state):
    """Show connection settings and the cluster API version."""
    s = state.settings
    table = Table(title="[brand]isilon status[/brand]", box=box.ROUNDED, header_style="brand.bright")
    table.add_column("Setting", style="brand", no_wrap=True)
    table.add_column("Value", style="text")
    table.add_row("Endpoint", s.endpoint or "[text.muted]Not set[/text.muted]")
    table.add_row("Username", s.username or "[text.muted]Not set[/text.muted]")
    table.add_row("Password", "••••••••" if s.password else "[text.muted]Not set[/text.muted]")
    table.add_row("Group", s.group or "[text.muted]Not set[/text.muted]")
    table.add_row("Volumes path", state.client.api.volumes_path)
    table.add_row("TLS verification", "off" if s.insecure else "on")
    table.add_row("API version", f"{state.client.api.api_version}.{state.client.api.api_minor_version}")
    console.print(table)


@cli.group()
def volume():
    """Create, list, copy and delete volumes."""


@volume.command("list")
@click.pass_obj
@handle_errors
def volume_list(state):
    """List all volumes."""
    table = Table(box=box.ROUNDED, header_style="brand.bright")
    table.add_column("Name", style="brand")
    table.add_column("Path", style="text")
    for v in state.client.get_volumes():
        table.add_row(v.name, state.client.volume_path(v.name))
    console.print(table)


@volume.command("show")
@click.argument("name")
@click.pass_obj
@handle_errors
def volume_show(state, name):
    """Show the metadata attributes of a volume."""
    v = state.client.get_volume(name=name)
    table = Table(title=f"[brand]{v.name}[/brand]", box=box.ROUNDED, header_style="brand.bright")
    table.add_column("Attribute", style="brand")
    table.add_column("Value", style="text")
    for key, value in sorted(v.attributes.items()):
        table.add_row(key, str(value))
    console.print(table)


@volume.command("create")
@click.argument("name")
@click.option("--acl", default=None, help="Access control applied on creation (default public_read_write)")
@click.pass_obj
@handle_errors
def volume_create(state, name, acl):
    """Create a volume owned by the API user."""
    if acl:
        state.client.create_volume_with_acl(name, acl)
    else:
        state.client.create_volume(name)
    console.print(f"[success]✓ Created volume {name}[/success]")


@volume.command("delete")
@click.argument("name")
@click.confirmation_option(prompt="Delete the volume and everything in it?")
@click.pass_obj
@handle_errors
def volume_delete(state, name):
    """Delete a volume recursively."""
    state.client.delete_volume(name)
    console.print(f"[success]✓ Deleted volume {name}[/success]")


@volume.command("copy")
@click.argument("source")
@click.argument("destination")
@click.pass_obj
@handle_errors
def volume_copy(state, source, destination):
    """Copy a volume into a new one."""
    state.client.copy_volume(source, destination)
    console.print(f"[success]✓ Copied {source} to {destination}[/success]")


@volume.command("upload")
@click.argument("name")
@click.argument("file", type=click.File("rb"))
@click.option("--as", "object_name", default=None, help="Object name inside the volume")
@click.pass_obj
@handle_errors
def volume_upload(state, name, file, object_name):
    """Upload a local file into a volume."""
    object_name = object_name or os.path.basename(file.name)
    state.client.upload_object(name, object_name, file)
    console.print(f"[success]✓ Uploaded {object_name} to {name}[/success]")


@cli.group()
def quota():
    """Manage directory quotas on volumes."""


@quota.command("show")
@click.argument("name")
@click.pass_obj
@handle_errors
def quota_show(state, name):
    """Show the quota of a volume."""
    q = state.client.get_quota(name)
    t = q.thresholds
    console.print(Panel(
        f"Id: [brand]{q.id}[/brand]\n"
        f"Path: {q.path}\n"
        f"Type: {q.type}\n"
        f"Enforced: {q.enforced}\n"
        f"Container: {q.container}\n"
        f"Hard: {t.hard}  Soft: {t.soft}  Advisory: {t.advisory}\n"
        f"Usage (logical): {q.usage.logical}",
        title=f"[brand]Quota {name}[/brand]",
        border_style="brand",
        box=box.ROUNDED,
    ))


@quota.command("create")
@click.argument("name")
@click.argument("size", type=int)
@click.option("--container/--no-container", default=False, help="Report the quota size as the volume size")
@click.pass_obj
@handle_errors
def quota_create(state, name, size, container):
    """Create a hard quota of SIZE bytes on a volume."""
    state.client.create_quota(name, container, size)
    console.print(f"[success]✓ Quota of {size} bytes set on {name}[/success]")


@quota.command("set")
@click.argument("name")
@click.argument("size", type=int)
@click.pass_obj
@handle_errors
def quota_set(state, name, size):
    """Change the hard threshold of an existing quota."""
    state.client.update_quota_size(name, size)
    console.print(f"[success]✓ Quota on {name} is now {size} bytes[/success]")


@quota.command("clear")
@click.argument("name")
@click.pass_obj
@handle_errors
def quota_clear(state, name):
    """Remove the quota from a volume."""
    state.client.clear_quota(name)
    console.print(f"[success]✓ Quota removed from {name}[/success]")


@cli.group()
def snapshot():
    """Create, list, copy and remove snapshots."""


def _snapshot_table(items):
    table = Table(box=box.ROUNDED, header_style="brand.bright")
    table.add_column("Id", style="brand", justify="right")
    table.add_column("Name", style="text")
    table.add_column("Path", style="text")
    table.add_column("State", style="text.muted")
    for s in items:
        table.add_row(str(s.id), s.name, s.path, s.state)
    return table


@snapshot.command("list")
@click.option("--volume", "volume_name", default=None, help="Only snapshots of this volume")
@click.pass_obj
@handle_errors
def snapshot_list(state, volume_name):
    """List snapshots."""
    if volume_name:
        items = state.client.get_snapshots_by_path(volume_name)
    else:
        items = state.client.get_snapshots()
    console.print(_snapshot_table(items))


@snapshot.command("show")
@click.option("--id", "snapshot_id", type=int, default=None, help="Snapshot id")
@click.option("--name", default="", help="Snapshot name, used when the id does not match")
@click.pass_obj
@handle_errors
def snapshot_show(state, snapshot_id, name):
    """Show one snapshot."""
    s = state.client.get_snapshot(snapshot_id, name)
    if s is None:
        print_error(f"Snapshot doesn't exist: ({snapshot_id}, {name})")
        raise click.Abort()
    console.print(_snapshot_table([s]))


@snapshot.command("create")
@click.argument("volume_name")
@click.argument("name")
@click.pass_obj
@handle_errors
def snapshot_create(state, volume_name, name):
    """Snapshot a volume."""
    s = state.client.create_snapshot(volume_name, name)
    suffix = f" (id {s.id})" if s is not None else ""
    console.print(f"[success]✓ Created snapshot {name}{suffix}[/success]")


@snapshot.command("delete")
@click.option("--id", "snapshot_id", type=int, default=None, help="Snapshot id")
@click.option("--name", default="", help="Snapshot name, used when the id does not match")
@click.pass_obj
@handle_errors
def snapshot_delete(state, snapshot_id, name):
    """Remove a snapshot."""
    state.client.remove_snapshot(snapshot_id, name)
    console.print("[success]✓ Snapshot removed[/success]")


@snapshot.command("copy")
@click.argument("destination")
@click.option("--id", "snapshot_id", type=int, default=None, help="Snapshot id")
@click.option("--name", default="", help="Snapshot name, used when the id does not match")
@click.pass_obj
@handle_errors
def snapshot_copy(state, destination, snapshot_id, name):
    """Restore a snapshot into a new volume DESTINATION."""
    state.client.copy_snapshot(snapshot_id, name, destination)
    console.print(f"[success]✓ Copied snapshot into {destination}[/success]")


@cli.group()
def acl():
    """Inspect and change volume ownership and permissions."""


@acl.command("show")
@click.argument("name")
@click.pass_obj
@handle_errors
def acl_show(state, name):
    """Show the owner, group and mode of a volume."""
    a = state.client.get_volume_acl(name)

    def persona(p):
        if p is None:
            return "-"
        return p.name or (str(p.id) if p.id else "-")

    console.print(Panel(
        f"Owner: [brand]{persona(a.owner)}[/brand]\n"
        f"Group: {persona(a.group)}\n"
        f"Mode: {a.mode if a.mode is not None else '-'}\n"
        f"Authoritative: {a.authoritative or '-'}\n"
        f"ACEs: {len(a.acl)}",
        title=f"[brand]ACL {name}[/brand]",
        border_style="brand",
        box=box.ROUNDED,
    ))


@acl.command("owner")
@click.argument("name")
@click.argument("user", required=False)
@click.pass_obj
@handle_errors
def acl_owner(state, name, user):
    """Make USER (default: the API user) own a volume."""
    if user:
        state.client.set_volume_owner(name, user)
    else:
        state.client.set_volume_owner_to_current_user(name)
    console.print(f"[success]✓ Owner of {name} updated[/success]")


@acl.command("mode")
@click.argument("name")
@click.argument("mode")
@click.pass_obj
@handle_errors
def acl_mode(state, name, mode):
    """Set the permission bits of a volume, e.g. 0755."""
    try:
        value = int(mode, 8)
    except ValueError:
        raise click.BadParameter(f"{mode!r} is not an octal mode", param_hint="MODE")
    state.client.set_volume_mode(name, value)
    console.print(f"[success]✓ Mode of {name} set to {value:04o}[/success]")
