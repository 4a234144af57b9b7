import json

import pytest


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    @property
    def ok(self):
        return self.status_code < 400

    @property
    def content(self):
        return b"" if self._body is None else json.dumps(self._body).encode()

    def json(self):
        if self._body is None:
            raise ValueError("no body")
        return self._body


class FakeHttp:
    """Stands in for requests.Session; answers by (method, url) and records calls."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def route(self, method, url, response):
        self.routes[(method, url)] = response

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        answer = self.routes.get((method, url), FakeResponse(404, {"error": "not found"}))
        if isinstance(answer, Exception):
            raise answer
        return answer

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def posts_to(self, url):
        return [kw for method, u, kw in self.calls if method == "POST" and u == url]


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def reply():
    return FakeResponse
