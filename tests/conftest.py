import json

import httpx
import pytest

from isilonpapi.client import IsilonClient
from isilonpapi.core.http import ClientOptions, PapiClient

ENDPOINT = "https://isilon.test:8080"
USERNAME = "admin"
PASSWORD = "secret"


class FakeAppliance:
    """Serves canned PAPI responses and records every request it sees."""

    def __init__(self, latest="5"):
        self.latest = latest
        self.requests = []
        self._routes = {}

    def add(self, method, path, status=200, json_body=None, content=None, query=None, headers=None):
        """Queue a response for ``method path[?query]``.

        Responses queued for the same route are served in order; the last one
        keeps being served once the queue runs dry.
        """
        if json_body is not None:
            content = json.dumps(json_body).encode()
            headers = dict(headers or {}, **{"Content-Type": "application/json"})
        response = (status, content or b"", headers or {})
        self._routes.setdefault((method, path, query), []).append(response)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        query = request.url.query.decode() or None

        if request.method == "GET" and path == "/platform/latest/":
            if isinstance(self.latest, httpx.Response):
                return self.latest
            return httpx.Response(200, json={"latest": self.latest})

        queue = self._routes.get((request.method, path, query)) or self._routes.get((request.method, path, None))
        if not queue:
            return httpx.Response(404, json={"errors": [{"code": "AEC_NOT_FOUND", "message": f"{path} not found"}]})
        status, content, headers = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(status, content=content, headers=headers)

    @property
    def calls(self):
        """Requests other than the version probe."""
        return [r for r in self.requests if r.url.path != "/platform/latest/"]

    @property
    def last(self):
        return self.calls[-1]


def json_of(request: httpx.Request):
    return json.loads(request.content)


@pytest.fixture
def appliance():
    return FakeAppliance()


@pytest.fixture
def transport(appliance):
    return httpx.MockTransport(appliance.handler)


@pytest.fixture
def papi(transport):
    client = PapiClient(ENDPOINT, USERNAME, PASSWORD, "wheel", ClientOptions(transport=transport))
    yield client
    client.close()


@pytest.fixture
def client(transport):
    c = IsilonClient(ENDPOINT, USERNAME, PASSWORD, transport=transport)
    yield c
    c.close()
