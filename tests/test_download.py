import json

import pytest
import requests

from air_fetch.core.download import fetch_asset
from air_fetch.core.errors import DownloadFailed, IntegrityMismatch, TransportError, UnknownSize
from air_fetch.core.sidecar import sidecar_path

from conftest import URN, FakeResponse, FakeSession, sha

URL = "https://cdn.test/model.safetensors"
DATA = b"0123456789abcdef" * 20_000


def session_with(route) -> FakeSession:
    return FakeSession({URL: route})


def test_streams_file_and_writes_sidecar(tmp_path):
    dest = tmp_path / "models" / "model.safetensors"
    seen = []
    out = fetch_asset(
        session_with(FakeResponse(body=DATA)), URL, "secret", dest, URN,
        expected_hash=sha(DATA).upper(), on_progress=lambda done, total: seen.append((done, total)),
        chunk_size=64 * 1024,
    )
    assert out == dest
    assert dest.read_bytes() == DATA
    meta = json.loads(sidecar_path(dest).read_text(encoding="utf-8"))
    assert meta["urn"] == URN
    assert "datetime" in meta

    assert seen[-1] == (len(DATA), len(DATA))
    counts = [done for done, _ in seen]
    assert counts == sorted(counts) and len(set(counts)) == len(counts)
    assert all(total == len(DATA) for _, total in seen)


def test_sends_bearer_token(tmp_path):
    session = session_with(FakeResponse(body=b"x"))
    fetch_asset(session, URL, "secret", tmp_path / "m.bin", URN)
    _, kwargs = session.calls[0]
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["stream"] is True


def test_overwrites_existing_file(tmp_path):
    dest = tmp_path / "m.bin"
    dest.write_bytes(b"stale and much longer than the new content")
    fetch_asset(session_with(FakeResponse(body=b"fresh")), URL, "t", dest, URN)
    assert dest.read_bytes() == b"fresh"


def test_http_error(tmp_path):
    dest = tmp_path / "m.bin"
    with pytest.raises(DownloadFailed) as exc:
        fetch_asset(session_with(FakeResponse(status_code=401)), URL, "bad", dest, URN)
    assert exc.value.status == 401
    assert not dest.exists()
    assert not sidecar_path(dest).exists()


def test_connection_error(tmp_path):
    with pytest.raises(TransportError):
        fetch_asset(session_with(requests.ConnectionError("refused")), URL, "t", tmp_path / "m.bin", URN)


def test_unknown_size(tmp_path):
    dest = tmp_path / "m.bin"
    with pytest.raises(UnknownSize):
        fetch_asset(session_with(FakeResponse(body=DATA, headers={})), URL, "t", dest, URN)
    assert not dest.exists()


def test_interrupted_stream_leaves_no_sidecar(tmp_path):
    dest = tmp_path / "m.bin"
    resp = FakeResponse(body=DATA, fail_after=2)
    with pytest.raises(TransportError):
        fetch_asset(session_with(resp), URL, "t", dest, URN, chunk_size=1024)
    assert dest.stat().st_size == 2048
    assert not sidecar_path(dest).exists()


def test_short_body_leaves_no_sidecar(tmp_path):
    dest = tmp_path / "m.bin"
    resp = FakeResponse(body=DATA[:100], headers={"Content-Length": str(len(DATA))})
    with pytest.raises(TransportError):
        fetch_asset(session_with(resp), URL, "t", dest, URN)
    assert not sidecar_path(dest).exists()


def test_checksum_mismatch_leaves_no_sidecar(tmp_path):
    dest = tmp_path / "m.bin"
    with pytest.raises(IntegrityMismatch):
        fetch_asset(session_with(FakeResponse(body=DATA)), URL, "t", dest, URN, expected_hash="00" * 32)
    assert not sidecar_path(dest).exists()
