import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from copycloud.client.api import CloudApi  # noqa: E402
from copycloud.client.session import ApiSession  # noqa: E402
from copycloud.config.config import CloudApiConfig  # noqa: E402
from copycloud.core.codecs import split_binary_tail  # noqa: E402
from copycloud.core.fingerprint import fingerprint  # noqa: E402
from copycloud.core.models import PartRecord  # noqa: E402
from copycloud.core.wire import decode_message, encode_error_reply, encode_message  # noqa: E402
from copycloud.transport.http import HttpTransport  # noqa: E402
from copycloud.transport.signing import Signer  # noqa: E402

BASE_URL = "https://cloud.test/rest"


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line(
        "markers",
        "integration: end-to-end tests against the in-memory fake cloud",
    )


class StaticSigner(Signer):
    """Signer that records what it was asked to sign."""

    def __init__(self, value: str = 'OAuth oauth_signature="test"') -> None:
        self.value = value
        self.calls: List[Tuple[str, str]] = []

    def sign(self, method: str, url: str) -> str:
        self.calls.append((method, url))
        return self.value


class FakeCloud:
    """
    In-memory store speaking both part wire generations and JSON-RPC.

    Parts are keyed by (fingerprint, share_id); objects by path.
    """

    def __init__(self) -> None:
        self.parts: Dict[Tuple[str, int], bytes] = {}
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.calls: List[str] = []
        self.rpc_params: List[Dict[str, Any]] = []
        self.list_pages: Optional[List[Dict[str, Any]]] = None
        self.header_error: Optional[str] = None
        self.corrupt_payloads = False
        self.empty_payloads = False
        self.status_code = 200

    # plumbing

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, content=b"unavailable")
        endpoint = request.url.path.rsplit("/", 1)[-1]
        body = request.content
        if endpoint in ("has_object_parts", "send_object_parts", "get_object_parts"):
            self.calls.append(endpoint)
            if self.header_error:
                return self._binary(encode_error_reply(self.header_error, error_code=7))
            return getattr(self, f"_{endpoint}")(body)
        if endpoint == "jsonrpc_binary":
            return self._binary_rpc(body)
        if endpoint == "jsonrpc":
            return self._rpc(body)
        return httpx.Response(404, content=b"no such endpoint")

    def transport(self) -> HttpTransport:
        return HttpTransport(client=httpx.Client(transport=httpx.MockTransport(self.handler)))

    @staticmethod
    def _binary(content: bytes) -> httpx.Response:
        return httpx.Response(200, content=content)

    @staticmethod
    def _json(result: Any = None, error: Optional[Dict[str, Any]] = None, tail: Optional[bytes] = None) -> httpx.Response:
        content = json.dumps({"jsonrpc": "2.0", "id": "0", "result": result, "error": error}).encode()
        if tail is not None:
            content += b"\x00" + tail
        return httpx.Response(200, content=content)

    def store(self, data: bytes, share_id: int = 0) -> str:
        key = fingerprint(data)
        self.parts[(key, share_id)] = data
        return key

    def _outgoing(self, data: bytes) -> bytes:
        if self.empty_payloads:
            return b""
        if self.corrupt_payloads and data:
            return bytes([data[0] ^ 0xFF]) + data[1:]
        return data

    # generation 1

    def _has_object_parts(self, body: bytes) -> httpx.Response:
        _, record = decode_message(body)
        present = (record.fingerprint, record.share_id) in self.parts
        reply = PartRecord(record.share_id, record.fingerprint, record.size if present else 0)
        return self._binary(encode_message([reply]))

    def _send_object_parts(self, body: bytes) -> httpx.Response:
        _, record = decode_message(body)
        if fingerprint(record.payload) != record.fingerprint:
            error = PartRecord(record.share_id, record.fingerprint, record.size, b"Hash mismatch", error_code=3)
            return self._binary(encode_message([error]))
        self.parts[(record.fingerprint, record.share_id)] = record.payload
        return self._binary(encode_message([PartRecord(record.share_id, record.fingerprint, record.size)]))

    def _get_object_parts(self, body: bytes) -> httpx.Response:
        _, record = decode_message(body)
        data = self.parts.get((record.fingerprint, record.share_id))
        if data is None:
            error = PartRecord(record.share_id, record.fingerprint, record.size, b"Part not found", error_code=2)
            return self._binary(encode_message([error]))
        payload = self._outgoing(data)
        return self._binary(encode_message([PartRecord(record.share_id, record.fingerprint, record.size, payload)]))

    # generation 2

    def _binary_rpc(self, body: bytes) -> httpx.Response:
        head, tail = split_binary_tail(body)
        document = json.loads(head)
        method = document["method"]
        self.calls.append(method)
        parts = document["params"]["parts"]
        if self.header_error:
            return self._json(error={"code": 7, "message": self.header_error})

        if method == "has_object_parts_v2":
            needed = [p for p in parts if (p["fingerprint"], p.get("share_id", 0)) not in self.parts]
            return self._json({"needed_parts": needed})

        if method == "send_object_parts_v2":
            for part in parts:
                _, offset, size = part["data"].split("-")
                data = (tail or b"")[int(offset) : int(offset) + int(size)]
                if fingerprint(data) != part["fingerprint"]:
                    return self._json(error={"code": 3, "message": "Hash mismatch"})
                self.parts[(part["fingerprint"], part.get("share_id", 0))] = data
            return self._json({"parts": parts})

        if method == "get_object_parts_v2":
            part = parts[0]
            data = self.parts.get((part["fingerprint"], part.get("share_id", 0)))
            if data is None:
                return self._json(error={"code": 2, "message": "Part not found"})
            return self._json({"parts": [part]}, tail=self._outgoing(data))

        return self._json(error={"code": -32601, "message": f"Unknown method {method}"})

    # control plane

    def _rpc(self, body: bytes) -> httpx.Response:
        document = json.loads(body)
        method = document["method"]
        params = document["params"]
        self.calls.append(method)
        self.rpc_params.append(params)
        if method == "list_objects":
            return self._list_objects(params)
        if method == "update_objects":
            return self._update_objects(params)
        return self._json(error={"code": -32601, "message": f"Unknown method {method}"})

    def _public(self, obj: Dict[str, Any], include_parts: bool) -> Dict[str, Any]:
        if include_parts:
            return dict(obj)
        return {k: v for k, v in obj.items() if k != "revisions"}

    def _list_objects(self, params: Dict[str, Any]) -> httpx.Response:
        if self.list_pages is not None:
            page = self.list_pages.pop(0)
            if "error" in page:
                return self._json(error=page["error"])
            return self._json(page)

        path = params["path"]
        include_parts = bool(params.get("include_parts"))
        if path in self.objects:
            root = self._public(self.objects[path], include_parts)
            return self._json({"object": root, "children": [], "more_items": False})

        prefix = path.rstrip("/") + "/"
        children = [
            self._public(obj, include_parts)
            for name, obj in sorted(self.objects.items())
            if name.startswith(prefix)
        ]
        if not children:
            if path == "/":
                return self._json({"object": {"path": "/", "type": "dir"}, "children": [], "more_items": False})
            return self._json(error={"code": 1404, "message": f"Path not found {path}"})

        start = int(params["list_watermark"] or 0)
        size = int(params["max_items"])
        window = children[start : start + size]
        end = start + len(window)
        return self._json(
            {"children": window, "list_watermark": end, "more_items": end < len(children)}
        )

    def _update_objects(self, params: Dict[str, Any]) -> httpx.Response:
        results = []
        for meta in params["meta"]:
            action = meta["action"]
            path = meta["path"]
            if action == "create":
                missing = [p for p in meta["parts"] if not any(k[0] == p["fingerprint"] for k in self.parts)]
                if missing:
                    return self._json(error={"code": 1401, "message": f"Missing part {missing[0]['fingerprint']}"})
                self.objects[path] = {
                    "path": path,
                    "type": "file",
                    "size": meta["size"],
                    "revisions": [{"parts": meta["parts"]}],
                }
                results.append(self._public(self.objects[path], False))
            elif action == "remove":
                if path not in self.objects:
                    return self._json(error={"code": 1404, "message": f"Object not found {path}"})
                del self.objects[path]
                results.append({"path": path, "removed": True})
            elif action == "rename":
                if path not in self.objects:
                    return self._json(error={"code": 1404, "message": f"Object not found {path}"})
                obj = self.objects.pop(path)
                obj["path"] = meta["new_path"]
                self.objects[meta["new_path"]] = obj
                results.append(self._public(obj, False))
        return self._json(results)


@pytest.fixture
def fake_cloud() -> FakeCloud:
    return FakeCloud()


@pytest.fixture
def signer() -> StaticSigner:
    return StaticSigner()


@pytest.fixture
def session(fake_cloud: FakeCloud, signer: StaticSigner) -> ApiSession:
    return ApiSession(BASE_URL, fake_cloud.transport(), signer, clock=lambda: 1700000000.0)


@pytest.fixture(params=[1, 2], ids=["gen1", "gen2"])
def wire_generation(request: pytest.FixtureRequest) -> int:
    return request.param


@pytest.fixture
def api_factory(fake_cloud: FakeCloud, signer: StaticSigner):
    """Build CloudApi instances wired to the fake cloud."""

    def factory(**overrides: Any) -> CloudApi:
        config = CloudApiConfig(base_url=BASE_URL, **overrides)
        return CloudApi(config, transport=fake_cloud.transport(), signer=signer)

    return factory
