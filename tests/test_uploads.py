import threading

import pytest

from gallery import storage, uploads
from gallery.errors import InvalidPath, UploadError
from gallery.uploads import BatchKind, UploadedFile, ingest, normalize_files


def _file(name, data=b"data", mimetype="image/jpeg"):
    return UploadedFile.from_bytes(name, data, mimetype)


def test_normalize_single():
    batch = normalize_files(_file("a.jpg"))
    assert batch.kind is BatchKind.SINGLE
    assert [f.name for f in batch.files] == ["a.jpg"]


def test_normalize_list_and_mapping():
    assert normalize_files([_file("a"), _file("b")]).kind is BatchKind.MULTIPLE
    batch = normalize_files({"0": _file("a"), "1": _file("b")})
    assert batch.kind is BatchKind.MULTIPLE
    assert [f.name for f in batch.files] == ["a", "b"]


@pytest.mark.parametrize("field", [None, [], {}])
def test_normalize_nothing_uploaded(field):
    with pytest.raises(UploadError):
        normalize_files(field)


def test_normalize_rejects_non_files():
    with pytest.raises(UploadError):
        normalize_files(["a.jpg"])


def test_ingest_single_creates_collection(photo_root):
    summary = ingest(photo_root, "New Album", normalize_files(_file("a.jpg", b"abc")))
    assert [s.model_dump() for s in summary] == [
        {"name": "a.jpg", "mimetype": "image/jpeg", "size": 3, "ok": True, "error": None}
    ]
    assert (photo_root / "New Album" / "a.jpg").read_bytes() == b"abc"


def test_ingest_overwrites_existing(photo_root):
    ingest(photo_root, "c", normalize_files(_file("a.jpg", b"old")))
    ingest(photo_root, "c", normalize_files(_file("a.jpg", b"new")))
    assert storage.read_file(photo_root, "c", "a.jpg") == b"new"
    assert [e.name for e in storage.list_entries(photo_root, "c")] == ["a.jpg"]


def test_ingest_traversal_creates_nothing(tmp_path, photo_root):
    with pytest.raises(InvalidPath):
        ingest(photo_root, "../escape", normalize_files(_file("a.jpg")))
    assert not (tmp_path / "escape").exists()
    assert list(photo_root.iterdir()) == []


def test_ingest_single_with_bad_name(photo_root):
    with pytest.raises(InvalidPath):
        ingest(photo_root, "c", normalize_files(_file("../a.jpg")))


def test_ingest_multiple_reports_failed_items(photo_root):
    batch = normalize_files([_file("ok.jpg", b"1"), _file("../bad.jpg"), _file("also.jpg", b"2")])
    summary = ingest(photo_root, "c", batch)
    assert [(s.name, s.ok) for s in summary] == [("ok.jpg", True), ("../bad.jpg", False), ("also.jpg", True)]
    assert summary[1].error
    assert sorted(e.name for e in storage.list_entries(photo_root, "c")) == ["also.jpg", "ok.jpg"]


def test_ingest_multiple_all_failed(photo_root):
    batch = normalize_files([_file(".."), _file("a/b")])
    with pytest.raises(UploadError) as excinfo:
        ingest(photo_root, "c", batch)
    assert excinfo.value.status_code == 400
    assert len(excinfo.value.data) == 2


def test_ingest_write_failure_keeps_earlier_files(photo_root, monkeypatch):
    real_save = uploads.save_bytes

    def flaky(dest, data):
        if dest.name == "second.jpg":
            raise OSError("disk full")
        return real_save(dest, data)

    monkeypatch.setattr(uploads, "save_bytes", flaky)
    summary = ingest(photo_root, "c", normalize_files([_file("first.jpg"), _file("second.jpg")]))
    assert [s.ok for s in summary] == [True, False]
    assert "disk full" in summary[1].error
    assert (photo_root / "c" / "first.jpg").exists()


def test_ingest_single_write_failure(photo_root, monkeypatch):
    def broken(dest, data):
        raise PermissionError("read-only")

    monkeypatch.setattr(uploads, "save_bytes", broken)
    with pytest.raises(UploadError) as excinfo:
        ingest(photo_root, "c", normalize_files(_file("a.jpg")))
    assert excinfo.value.status_code == 500


def test_concurrent_uploads_never_mix(photo_root):
    payloads = [b"A" * 200_000, b"B" * 300_000]
    barrier = threading.Barrier(len(payloads))

    def upload(data):
        barrier.wait()
        ingest(photo_root, "race", normalize_files(_file("same.bin", data)))

    threads = [threading.Thread(target=upload, args=(p,)) for p in payloads]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert storage.read_file(photo_root, "race", "same.bin") in payloads
    assert [e.name for e in storage.list_entries(photo_root, "race")] == ["same.bin"]


def test_ingest_rejects_temp_prefixed_name(photo_root):
    with pytest.raises(InvalidPath):
        ingest(photo_root, "c", normalize_files(_file(".upload_notes.txt", b"x")))
    assert not (photo_root / "c").exists()


def test_ingest_name_with_double_dots_is_listed(photo_root):
    ingest(photo_root, "c", normalize_files(_file("Vol..2.jpg", b"x")))
    assert storage.read_file(photo_root, "c", "Vol..2.jpg") == b"x"
    assert [e.name for e in storage.list_entries(photo_root, "c")] == ["Vol..2.jpg"]
