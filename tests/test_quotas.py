"""Tests for directory quota requests."""
import pytest

from conftest import json_of
from isilonpapi.api import quotas
from isilonpapi.exceptions import NotFoundError, PapiError, QuotaNotFoundError

QUOTAS = "/platform/1/quota/quotas/"


def quota_json(id, path, hard=None):
    return {
        "id": id,
        "path": path,
        "type": "directory",
        "enforced": True,
        "container": True,
        "include_snapshots": False,
        "thresholds_include_overhead": False,
        "thresholds": {"advisory": None, "soft": None, "hard": hard, "hard_exceeded": False},
        "usage": {"inodes": 3, "logical": 1024, "physical": 4096},
    }


@pytest.fixture
def listing(appliance):
    appliance.add("GET", QUOTAS, json_body={"quotas": [
        quota_json("q-parent", "/ifs/volumes", hard=1),
        quota_json("q-v10", "/ifs/volumes/v10", hard=10),
        quota_json("q-v1", "/ifs/volumes/v1", hard=100),
    ]})
    return appliance


def test_get_quota_exact_path_match(client, listing):
    q = client.get_quota("v1")
    assert q.id == "q-v1"
    assert q.path == "/ifs/volumes/v1"
    assert q.thresholds.hard == 100
    assert q.usage.logical == 1024
    assert q.enforced and q.container
    assert listing.last.url.query == b"path=%2Fifs%2Fvolumes%2Fv1"


def test_get_quota_not_found(client, listing):
    with pytest.raises(QuotaNotFoundError) as exc:
        client.get_quota("v2")
    assert str(exc.value) == "Quota not found: /ifs/volumes/v2"
    assert isinstance(exc.value, NotFoundError)


def test_get_quota_empty_listing(papi, appliance):
    appliance.add("GET", QUOTAS, json_body={"quotas": []})
    with pytest.raises(QuotaNotFoundError):
        quotas.get_isi_quota(papi, "/ifs/volumes/v1")


def test_create_quota_payload(client, appliance):
    appliance.add("POST", QUOTAS, status=201, json_body={"id": "q-new"})
    client.create_quota("v1", True, 1024 ** 3)
    req = appliance.last
    assert req.method == "POST"
    assert req.headers["Content-Type"] == "application/json"
    assert json_of(req) == {
        "enforced": True,
        "include_snapshots": False,
        "path": "/ifs/volumes/v1",
        "container": True,
        "thresholds_include_overhead": False,
        "type": "directory",
        "thresholds": {"advisory": None, "hard": 1024 ** 3, "soft": None},
    }


def test_set_quota_size_creates_non_container_quota(client, appliance):
    appliance.add("POST", QUOTAS, status=201, json_body={"id": "q-new"})
    client.set_quota_size("v1", 500)
    body = json_of(appliance.last)
    assert body["container"] is False
    assert body["thresholds"]["hard"] == 500


def test_update_quota_size_puts_by_id(client, listing):
    listing.add("PUT", QUOTAS + "q-v1", status=204)
    client.update_quota_size("v1", 2048)
    lookup, update = listing.calls
    assert lookup.method == "GET"
    assert update.method == "PUT"
    assert update.url.path == QUOTAS + "q-v1"
    assert json_of(update) == {
        "enforced": True,
        "thresholds_include_overhead": False,
        "thresholds": {"advisory": None, "hard": 2048, "soft": None},
    }


def test_update_quota_size_without_quota(client, listing):
    with pytest.raises(QuotaNotFoundError):
        client.update_quota_size("missing", 1)
    assert all(r.method == "GET" for r in listing.calls)


def test_clear_quota(client, appliance):
    appliance.add("DELETE", QUOTAS, status=204)
    client.clear_quota("v1")
    req = appliance.last
    assert req.method == "DELETE"
    assert req.url.query == b"path=%2Fifs%2Fvolumes%2Fv1"


def test_clear_quota_error(client, appliance):
    appliance.add("DELETE", QUOTAS, status=404, json_body={"errors": [{"message": ""}]})
    with pytest.raises(PapiError) as exc:
        client.clear_quota("v1")
    assert str(exc.value) == "404 Not Found"


def test_quota_from_dict_defaults():
    q = quotas.Quota.from_dict({"id": "x", "path": "/ifs/a"})
    assert q.type == "directory"
    assert q.thresholds.hard is None
    assert q.usage.inodes == 0
