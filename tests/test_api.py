"""End-to-end tests for CloudApi against the in-memory fake cloud."""
import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from copycloud.client import api as api_module  # noqa: E402
from copycloud.client.api import CloudApi  # noqa: E402
from copycloud.config.config import CloudApiConfig  # noqa: E402
from copycloud.core.errors import ChecksumError, CodecError  # noqa: E402
from copycloud.core.fingerprint import fingerprint  # noqa: E402
from copycloud.transport.signing import OAuth1Signer  # noqa: E402


@pytest.fixture
def source_file(tmp_path):
    data = os.urandom(10_000)
    path = tmp_path / "source.bin"
    path.write_bytes(data)
    return path, data


@pytest.mark.integration
def test_upload_download_round_trip(api_factory, fake_cloud, source_file, tmp_path, wire_generation):
    path, data = source_file
    target = tmp_path / "copy.bin"

    with api_factory(wire_generation=wire_generation, chunk_size=4096) as api:
        manifest = api.upload_file(str(path), "/backup/source.bin")
        written = api.download_file("/backup/source.bin", str(target))

    assert [p.size for p in manifest.parts] == [4096, 4096, 1808]
    assert [p.offset for p in manifest.parts] == [0, 4096, 8192]
    assert manifest.total_size == len(data)
    assert written == len(data)
    assert target.read_bytes() == data


@pytest.mark.integration
def test_upload_skips_parts_already_stored(api_factory, fake_cloud, tmp_path):
    path = tmp_path / "repeated.bin"
    path.write_bytes(b"A" * 100 + b"B" * 100 + b"A" * 100)

    with api_factory(chunk_size=100) as api:
        manifest = api.upload_file(str(path), "/repeated.bin")

    assert fake_cloud.calls.count("has_object_parts") == 3
    assert fake_cloud.calls.count("send_object_parts") == 2
    assert manifest.parts[0].fingerprint == manifest.parts[2].fingerprint
    assert len(fake_cloud.parts) == 2


@pytest.mark.integration
def test_find_file_returns_parts(api_factory, source_file):
    path, _ = source_file

    with api_factory(chunk_size=5000) as api:
        api.upload_file(str(path), "/a/source.bin")
        meta = api.find_file("/a/source.bin")

    assert meta.is_file
    assert meta.size == 10_000
    assert [p.offset for p in meta.latest_parts()] == [0, 5000]


@pytest.mark.integration
def test_find_file_missing(api_factory, fake_cloud):
    with api_factory() as api:
        with pytest.raises(FileNotFoundError):
            api.find_file("/")


@pytest.mark.integration
def test_download_removes_partial_file_on_corruption(api_factory, fake_cloud, source_file, tmp_path):
    path, _ = source_file
    target = tmp_path / "broken.bin"

    with api_factory(chunk_size=4096) as api:
        api.upload_file(str(path), "/source.bin")
        fake_cloud.corrupt_payloads = True
        with pytest.raises(ChecksumError):
            api.download_file("/source.bin", str(target))

    assert not target.exists()


@pytest.mark.integration
def test_download_detects_size_mismatch(api_factory, fake_cloud, source_file, tmp_path):
    path, _ = source_file
    target = tmp_path / "short.bin"

    with api_factory() as api:
        api.upload_file(str(path), "/source.bin")
        fake_cloud.objects["/source.bin"]["size"] = 20_000
        with pytest.raises(CodecError, match="object size is 20000"):
            api.download_file("/source.bin", str(target))

    assert not target.exists()


@pytest.mark.integration
def test_download_keeps_existing_file_when_open_fails(
    api_factory, source_file, tmp_path, monkeypatch
):
    path, _ = source_file
    target = tmp_path / "keep.bin"
    target.write_bytes(b"precious")

    def refuse_open(*args, **kwargs):
        raise PermissionError("read-only target")

    with api_factory() as api:
        api.upload_file(str(path), "/source.bin")
        monkeypatch.setattr(api_module, "open", refuse_open, raising=False)
        with pytest.raises(PermissionError):
            api.download_file("/source.bin", str(target))

    assert target.read_bytes() == b"precious"


@pytest.mark.integration
def test_delegated_operations(api_factory, fake_cloud):
    data = b"delegated"
    with api_factory(wire_generation=2) as api:
        ref = api.send_data(data)
        assert api.has_part(ref.fingerprint, ref.size)
        assert api.get_part(ref.fingerprint, ref.size) == data

        api.create_file("/d.txt", [ref])
        assert api.rename("/d.txt", "/e.txt").path == "/e.txt"
        assert api.list_path("/").paths == ["/e.txt"]
        api.remove_file("/e.txt")

    assert fake_cloud.objects == {}
    assert ref.fingerprint == fingerprint(data)


@pytest.mark.unit
def test_default_signer_requires_credentials():
    with pytest.raises(ValueError):
        CloudApi(CloudApiConfig())


@pytest.mark.unit
def test_default_wiring_from_credentials():
    config = CloudApiConfig(
        consumer_key="ck", consumer_secret="cs", access_token="at", token_secret="ts"
    )
    with CloudApi(config) as api:
        assert isinstance(api.session.signer, OAuth1Signer)
        assert api.parts.codec.generation == 1
        assert api.paginator.page_size == 10
