import hashlib
import io
import os

import pytest
from PIL import Image

from marketplace.exceptions import InvalidRequest, NotFound, StorageError
from marketplace.infrastructure.storage.local_image_store import LocalImageStore


def stored_files(store):
    return sorted(f for f in os.listdir(store.image_dir) if f != store.default_image)


def test_store_names_file_after_sha256(image_store):
    data = b"\xff\xd8\xffphoto-bytes"
    filename = image_store.store(data)
    assert filename == hashlib.sha256(data).hexdigest() + ".jpg"
    with open(os.path.join(image_store.image_dir, filename), "rb") as f:
        assert f.read() == data


def test_store_identical_bytes_once(image_store):
    first = image_store.store(b"same")
    second = image_store.store(b"same")
    assert first == second
    assert stored_files(image_store) == [first]


def test_store_existing_file_is_not_rewritten(image_store):
    filename = image_store.store(b"same")
    path = os.path.join(image_store.image_dir, filename)
    os.utime(path, (1_000_000, 1_000_000))
    image_store.store(b"same")
    assert os.stat(path).st_mtime == 1_000_000


def test_store_rejects_empty_bytes(image_store):
    with pytest.raises(InvalidRequest):
        image_store.store(b"")


def test_store_write_failure_raises_storage_error(tmp_path):
    store = LocalImageStore(str(tmp_path / "missing"))
    with pytest.raises(StorageError):
        store.store(b"data")


def test_ensure_default_image_creates_jpeg(tmp_path):
    store = LocalImageStore(str(tmp_path / "images"))
    store.ensure_default_image()
    with open(store.default_path, "rb") as f:
        img = Image.open(io.BytesIO(f.read()))
        assert img.format == "JPEG"


def test_ensure_default_image_keeps_existing(tmp_path):
    image_dir = tmp_path / "images"
    image_dir.mkdir()
    (image_dir / "default.jpg").write_bytes(b"shipped default")
    store = LocalImageStore(str(image_dir))
    store.ensure_default_image()
    assert (image_dir / "default.jpg").read_bytes() == b"shipped default"


def test_resolve_existing_image(image_store):
    filename = image_store.store(b"photo")
    assert image_store.resolve(filename) == os.path.join(image_store.image_dir, filename)
    assert image_store.resolve("default.jpg") == image_store.default_path


@pytest.mark.parametrize("filename", [
    "../secret.jpg",
    "../../etc/passwd",
    "nested/../../secret.jpg",
    "nested/../default.jpg",
    "..\\secret.jpg",
    "..",
    "/etc/passwd",
    "/tmp/outside.jpg",
    "a\x00.jpg",
])
def test_resolve_rejects_traversal(image_store, filename):
    with pytest.raises(InvalidRequest):
        image_store.resolve(filename)


def test_resolve_rejects_symlink_out_of_root(image_store, tmp_path):
    outside = tmp_path / "outside.jpg"
    outside.write_bytes(b"not yours")
    os.symlink(str(outside), os.path.join(image_store.image_dir, "link.jpg"))
    with pytest.raises(InvalidRequest):
        image_store.resolve("link.jpg")


@pytest.mark.parametrize("filename", ["notes.txt", "photo.png", "photo", "photo.jpg.exe"])
def test_resolve_rejects_other_suffixes(image_store, filename):
    with pytest.raises(InvalidRequest):
        image_store.resolve(filename)


def test_resolve_accepts_jpeg_suffix_case_insensitively(image_store):
    with pytest.raises(NotFound):
        image_store.resolve("PHOTO.JPEG")


def test_resolve_missing_file(image_store):
    with pytest.raises(NotFound):
        image_store.resolve("0" * 64 + ".jpg")


def test_resolve_requires_filename(image_store):
    with pytest.raises(InvalidRequest):
        image_store.resolve("")
