import zipfile
from io import BytesIO

from app.core.archive import CHUNK_SIZE, archive_names, stream_zip


def read_archive(chunks):
    return zipfile.ZipFile(BytesIO(b"".join(chunks)))


def test_streams_existing_files(tmp_path):
    first = tmp_path / "a.webp"
    second = tmp_path / "b.webp"
    first.write_bytes(b"first file")
    second.write_bytes(b"second file")

    archive = read_archive(stream_zip([(str(first), "one.webp"), (str(second), "two.webp")]))

    assert archive.namelist() == ["one.webp", "two.webp"]
    assert archive.read("one.webp") == b"first file"
    assert archive.read("two.webp") == b"second file"
    assert archive.testzip() is None


def test_missing_files_are_skipped(tmp_path):
    present = tmp_path / "present.jpg"
    present.write_bytes(b"still here")

    archive = read_archive(stream_zip([
        (str(tmp_path / "gone.jpg"), "gone.jpg"),
        (str(present), "present.jpg"),
    ]))

    assert archive.namelist() == ["present.jpg"]


def test_large_file_is_streamed_in_several_chunks(tmp_path):
    payload = bytes(range(256)) * (CHUNK_SIZE // 64)
    big = tmp_path / "big.bin"
    big.write_bytes(payload)

    chunks = list(stream_zip([(str(big), "big.bin")]))

    assert len(chunks) > 1
    assert read_archive(chunks).read("big.bin") == payload


def test_empty_archive_is_valid():
    assert read_archive(stream_zip([])).namelist() == []


def test_archive_names_use_fallback_for_duplicates():
    names = archive_names([
        ("compressed-photo.webp", "compressed-webp-1-1.webp"),
        ("compressed-photo.webp", "compressed-webp-2-2.webp"),
        ("compressed-photo.webp", "compressed-webp-2-2.webp"),
    ])
    assert names == [
        "compressed-photo.webp",
        "compressed-webp-2-2.webp",
        "compressed-webp-2-2-1.webp",
    ]
