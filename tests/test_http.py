"""Tests for the generic PAPI HTTP client."""
import base64
import io
import logging

import httpx
import pytest

from conftest import ENDPOINT, PASSWORD, USERNAME, FakeAppliance, json_of
from isilonpapi.core.http import ClientOptions, PapiClient, parse_api_version
from isilonpapi.core.params import OrderedValues
from isilonpapi.exceptions import (
    ClientConfigError,
    IsilonError,
    PapiDecodeError,
    PapiError,
    UnsupportedVersionError,
)


def make_client(appliance, **options):
    return PapiClient(
        ENDPOINT, USERNAME, PASSWORD,
        options=ClientOptions(transport=httpx.MockTransport(appliance.handler), **options),
    )


class Payload:
    def __init__(self, **fields):
        self.fields = fields

    def to_dict(self):
        return dict(self.fields)


class Echo:
    def __init__(self, data):
        self.data = data

    @classmethod
    def from_dict(cls, data):
        return cls(data)


class TestConstruction:

    @pytest.mark.parametrize("hostname, username, password", [
        ("", USERNAME, PASSWORD),
        (ENDPOINT, "", PASSWORD),
        (ENDPOINT, USERNAME, ""),
    ])
    def test_missing_credentials(self, hostname, username, password):
        appliance = FakeAppliance()
        with pytest.raises(ClientConfigError):
            PapiClient(hostname, username, password,
                       options=ClientOptions(transport=httpx.MockTransport(appliance.handler)))
        assert appliance.requests == []

    def test_probe_reads_major_and_minor(self):
        appliance = FakeAppliance(latest="8.2")
        with make_client(appliance) as c:
            assert c.api_version == 8
            assert c.api_minor_version == 2
        assert str(appliance.requests[0].url) == f"{ENDPOINT}/platform/latest/"

    def test_probe_major_only(self):
        with make_client(FakeAppliance(latest="5")) as c:
            assert (c.api_version, c.api_minor_version) == (5, 0)

    def test_old_appliance_is_rejected(self):
        with pytest.raises(UnsupportedVersionError) as exc:
            make_client(FakeAppliance(latest="2"))
        assert "older than 8.0" in str(exc.value)
        assert exc.value.version == 2

    def test_undecodable_probe_falls_back_to_v2(self):
        appliance = FakeAppliance(latest=httpx.Response(200, content=b"<html>"))
        with pytest.raises(UnsupportedVersionError):
            make_client(appliance)

    def test_probe_without_latest_falls_back_to_v2(self):
        appliance = FakeAppliance(latest=httpx.Response(200, json={}))
        with pytest.raises(UnsupportedVersionError):
            make_client(appliance)

    def test_failed_probe_aborts_construction(self):
        appliance = FakeAppliance(latest=httpx.Response(
            401, json={"errors": [{"code": "AEC_UNAUTHORIZED", "message": "Authorization required"}]}))
        with pytest.raises(PapiError) as exc:
            make_client(appliance)
        assert exc.value.status_code == 401
        assert str(exc.value) == "Authorization required"

    def test_garbage_version_string(self):
        with pytest.raises(IsilonError, match="invalid API version"):
            make_client(FakeAppliance(latest="eight"))

    def test_accessors(self, papi):
        assert papi.user == USERNAME
        assert papi.group == "wheel"
        assert papi.volumes_path == "/ifs/volumes"
        assert papi.volume_path("v1") == "/ifs/volumes/v1"

    def test_custom_volumes_path(self):
        with make_client(FakeAppliance(), volumes_path="/ifs/data/k8s") as c:
            assert c.volume_path("pv-1") == "/ifs/data/k8s/pv-1"


def test_parse_api_version():
    assert parse_api_version("16") == (16, 0)
    assert parse_api_version("3.1") == (3, 1)
    with pytest.raises(IsilonError):
        parse_api_version("3.x")


class TestRequests:

    def test_basic_auth_on_every_request(self, papi, appliance):
        appliance.add("GET", "/platform/1/cluster/config/", json_body={"name": "c1"})
        papi.get("platform/1/cluster/config", resp_type=dict)
        expected = "Basic " + base64.b64encode(f"{USERNAME}:{PASSWORD}".encode()).decode()
        assert all(r.headers["Authorization"] == expected for r in appliance.requests)

    def test_get_decodes_json(self, papi, appliance):
        appliance.add("GET", "/platform/1/cluster/config/", json_body={"name": "c1"})
        assert papi.get("/platform/1/cluster/config/", resp_type=dict) == {"name": "c1"}

    def test_from_dict_contract(self, papi, appliance):
        appliance.add("GET", "/thing/1", json_body={"a": 1})
        resp = papi.get("thing", "1", resp_type=Echo)
        assert isinstance(resp, Echo)
        assert resp.data == {"a": 1}

    def test_no_resp_type_returns_none(self, papi, appliance):
        appliance.add("GET", "/thing/1", json_body={"a": 1})
        assert papi.get("thing", "1") is None

    def test_empty_2xx_body_returns_none(self, papi, appliance):
        appliance.add("PUT", "/thing/1", status=204)
        assert papi.put("thing", "1", body={"a": 1}, resp_type=dict) is None

    def test_malformed_2xx_body(self, papi, appliance):
        appliance.add("GET", "/thing/1", content=b"{not json")
        with pytest.raises(PapiDecodeError) as exc:
            papi.get("thing", "1", resp_type=dict)
        assert exc.value.body == b"{not json"
        assert isinstance(exc.value, ValueError)

    def test_params_are_appended_in_order(self, papi, appliance):
        appliance.add("GET", "/thing/", json_body={})
        papi.get("thing", params=OrderedValues([("b", "2"), ("a", "1"), ("b", "3")]))
        assert appliance.last.url.query == b"b=2&a=1&b=3"

    def test_json_body_defaults_to_json_content_type(self, papi, appliance):
        appliance.add("POST", "/thing/", json_body={})
        papi.post("thing", body=Payload(name="x", size=1))
        req = appliance.last
        assert req.headers["Content-Type"] == "application/json"
        assert json_of(req) == {"name": "x", "size": 1}

    def test_plain_dict_body(self, papi, appliance):
        appliance.add("POST", "/thing/", json_body={})
        papi.post("thing", body={"k": [1, 2]})
        assert json_of(appliance.last) == {"k": [1, 2]}

    def test_explicit_content_type_wins(self, papi, appliance):
        appliance.add("POST", "/thing/", json_body={})
        papi.post("thing", headers={"content-type": "application/x-custom"}, body={"k": 1})
        assert appliance.last.headers["Content-Type"] == "application/x-custom"

    def test_stream_body_is_binary(self, papi, appliance):
        appliance.add("PUT", "/namespace/ifs/volumes/v1/blob", status=200)
        stream = io.BytesIO(b"\x00\x01binary payload")
        papi.put("namespace/ifs/volumes", "v1/blob", body=stream)
        req = appliance.last
        assert req.headers["Content-Type"] == "binary/octet-stream"
        assert req.content == b"\x00\x01binary payload"
        assert stream.closed

    def test_stream_body_with_explicit_content_type(self, papi, appliance):
        appliance.add("PUT", "/files/report.txt", status=200)
        papi.put("files", "report.txt", headers={"Content-Type": "text/plain"}, body=io.BytesIO(b"hi"))
        assert appliance.last.headers["Content-Type"] == "text/plain"

    def test_raw_bytes_body_is_binary(self, papi, appliance):
        appliance.add("PUT", "/files/a", status=200)
        papi.put("files", "a", body=b"raw")
        assert appliance.last.headers["Content-Type"] == "binary/octet-stream"
        assert appliance.last.content == b"raw"

    def test_no_body_no_content_type(self, papi, appliance):
        appliance.add("DELETE", "/thing/1", status=204)
        papi.delete("thing", "1")
        assert "Content-Type" not in appliance.last.headers

    def test_custom_headers_are_sent(self, papi, appliance):
        appliance.add("PUT", "/namespace/ifs/volumes/v1", status=200)
        papi.put("namespace/ifs/volumes", "v1", headers={"x-isi-ifs-target-type": "container"})
        assert appliance.last.headers["x-isi-ifs-target-type"] == "container"

    def test_do_uses_given_method(self, papi, appliance):
        appliance.add("HEAD", "/thing/1", status=200)
        papi.do("HEAD", "thing", "1")
        assert appliance.last.method == "HEAD"

    def test_transport_errors_propagate(self):
        appliance = FakeAppliance()
        broken = {"on": False}

        def handler(request):
            if broken["on"]:
                raise httpx.ConnectError("connection refused", request=request)
            return appliance.handler(request)

        c = PapiClient(ENDPOINT, USERNAME, PASSWORD,
                       options=ClientOptions(transport=httpx.MockTransport(handler)))
        broken["on"] = True
        with pytest.raises(httpx.ConnectError):
            c.get("thing", "1")
        c.close()


class TestErrors:

    def test_first_error_message_is_surfaced(self, papi, appliance):
        appliance.add("GET", "/thing/1", status=404, json_body={"errors": [
            {"code": "AEC_NOT_FOUND", "field": "id", "message": "Path not found"},
            {"code": "AEC_OTHER", "message": "second"},
        ]})
        with pytest.raises(PapiError) as exc:
            papi.get("thing", "1", resp_type=dict)
        err = exc.value
        assert str(err) == "Path not found"
        assert err.status_code == 404
        assert err.code == "AEC_NOT_FOUND"
        assert err.errors[0].field == "id"
        assert len(err.errors) == 2

    def test_empty_message_uses_status_text(self, papi, appliance):
        appliance.add("DELETE", "/thing/1", status=409, json_body={"errors": [{"code": "AEC_CONFLICT", "message": ""}]})
        with pytest.raises(PapiError) as exc:
            papi.delete("thing", "1")
        assert str(exc.value) == "409 Conflict"

    def test_non_json_error_body_uses_status_text(self, papi, appliance):
        appliance.add("GET", "/thing/1", status=503, content=b"Service Unavailable")
        with pytest.raises(PapiError) as exc:
            papi.get("thing", "1")
        assert str(exc.value) == "503 Service Unavailable"
        assert exc.value.status_code == 503

    def test_error_without_resp_type_still_raises(self, papi, appliance):
        appliance.add("PUT", "/thing/1", status=400, json_body={"errors": [{"message": "bad"}]})
        with pytest.raises(PapiError, match="bad"):
            papi.put("thing", "1", body={})


class TestLogging:

    def test_requests_logged_at_debug(self, papi, appliance, caplog):
        appliance.add("POST", "/thing/", json_body={"ok": True})
        caplog.set_level(logging.DEBUG, logger="isilonpapi")
        papi.post("thing", body={"name": "x"}, resp_type=dict)
        text = caplog.text
        assert f"POST {ENDPOINT}/thing/" in text
        assert "Authorization: Basic" in text or "authorization: Basic" in text
        assert '{"name": "x"}' in text
        assert "200 OK" in text

    def test_nothing_logged_above_debug(self, papi, appliance, caplog):
        appliance.add("GET", "/thing/", json_body={})
        caplog.set_level(logging.INFO, logger="isilonpapi")
        papi.get("thing")
        assert "GET " not in caplog.text

    def test_per_client_logger(self, appliance, caplog):
        logger = logging.getLogger("isilonpapi.tests.cluster-a")
        caplog.set_level(logging.DEBUG, logger="isilonpapi.tests.cluster-a")
        appliance.add("GET", "/thing/", json_body={})
        with make_client(appliance, logger=logger) as c:
            c.get("thing")
        assert any(r.name == "isilonpapi.tests.cluster-a" and "GET" in r.getMessage()
                   for r in caplog.records)
