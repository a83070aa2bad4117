"""Tests for the IsilonClient facade constructors."""
import httpx
import pytest

from conftest import ENDPOINT, PASSWORD, USERNAME
from isilonpapi import IsilonClient
from isilonpapi.config import Settings
from isilonpapi.exceptions import ClientConfigError


def test_from_settings(transport, appliance):
    settings = Settings(endpoint=ENDPOINT, username=USERNAME, password=PASSWORD,
                        group="wheel", volumes_path="/ifs/k8s")
    with IsilonClient.from_settings(settings, transport=transport) as client:
        assert client.api.group == "wheel"
        assert client.api.user == USERNAME
        assert client.volume_path("v1") == "/ifs/k8s/v1"
        assert client.api_version == 5


def test_from_env(transport):
    env = {"ISILON_ENDPOINT": ENDPOINT, "ISILON_USERNAME": USERNAME, "ISILON_PASSWORD": PASSWORD}
    with IsilonClient.from_env(env, transport=transport) as client:
        assert client.volume_path("v1") == "/ifs/volumes/v1"


def test_from_env_missing_credentials(transport, appliance):
    with pytest.raises(ClientConfigError):
        IsilonClient.from_env({"ISILON_ENDPOINT": ENDPOINT}, transport=transport)
    assert appliance.requests == []


def test_context_manager_closes_http_client(transport):
    with IsilonClient(ENDPOINT, USERNAME, PASSWORD, transport=transport) as client:
        pass
    with pytest.raises(RuntimeError):
        client.api.get("platform/latest")


def test_unreachable_endpoint():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(httpx.ConnectError):
        IsilonClient(ENDPOINT, USERNAME, PASSWORD, transport=httpx.MockTransport(handler))
