import hashlib
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest
import requests

_NO_JSON = object()


class FakeResponse:
    """Just enough of requests.Response for the registry client and the fetcher."""

    def __init__(
        self,
        status_code: int = 200,
        body: bytes = b"",
        json_data: Any = _NO_JSON,
        headers: Optional[Dict[str, str]] = None,
        url: str = "",
        fail_after: Optional[int] = None,
    ):
        self.status_code = status_code
        self.body = body
        self._json = json_data
        self.url = url
        self.fail_after = fail_after
        if headers is None:
            headers = {"Content-Length": str(len(body))}
        self.headers = headers
        self.closed = False

    def json(self):
        if self._json is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._json

    def iter_content(self, chunk_size: int = 1):
        for n, i in enumerate(range(0, len(self.body), chunk_size)):
            if self.fail_after is not None and n >= self.fail_after:
                raise requests.exceptions.ChunkedEncodingError("connection broken")
            yield self.body[i:i + chunk_size]

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


Route = Union[FakeResponse, Exception, Callable[[], FakeResponse]]


class FakeSession:
    """Maps URLs to canned responses and records every GET."""

    def __init__(self, routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = dict(routes or {})
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def get(self, url: str, **kwargs):
        self.calls.append((url, kwargs))
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(status_code=404, url=url)
        if isinstance(route, Exception):
            raise route
        resp = route() if callable(route) else route
        resp.url = url
        return resp

    def count(self, url: str) -> int:
        return sum(1 for u, _ in self.calls if u == url)

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


REGISTRY = "https://registry.test/api/v1"
URN = "urn:air:sd1:checkpoint:civitai:1234@5678"


def sha(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def file_json(name: str, data: bytes, url: Optional[str] = None, upper: bool = True) -> Dict[str, Any]:
    digest = sha(data)
    return {
        "name": name,
        "downloadUrl": url or f"https://cdn.test/{name}",
        "hashes": {"SHA256": digest.upper() if upper else digest},
    }


def model_json(model_id: int = 1234, versions: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {"id": model_id, "modelVersions": versions or []}


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep the real settings file and environment out of every test."""
    for var in ("CIVITAI_TOKEN", "AIR_FETCH_BASE_DIR", "AIR_FETCH_REGISTRY", "AIR_FETCH_DIR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("AIR_FETCH_CONFIG", str(tmp_path / "settings" / "config.json"))


@pytest.fixture
def payload():
    """Model with one version (5678) holding one file."""
    data = b"weights-" * 4096
    files = [file_json("model.safetensors", data)]
    return data, model_json(versions=[{"id": 5678, "files": files}])


@pytest.fixture
def session(payload):
    data, body = payload
    return FakeSession({
        f"{REGISTRY}/models/1234": lambda: FakeResponse(json_data=body),
        "https://cdn.test/model.safetensors": lambda: FakeResponse(body=data),
    })
