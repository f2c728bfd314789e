"""
Tests for reading files at historical revisions.
"""
import pytest
from git import Actor

from storage import (
    CommitWriter,
    EncodingException,
    PathNotFoundAtRevisionException,
    RevisionNotFoundException,
    RevisionReader,
)

ALICE = Actor("Alice Liddell", "alice@example.com")


@pytest.fixture
def reader(handle):
    return RevisionReader(handle)


def _commit_file(handle, path, data: bytes, message):
    (handle.root / path).write_bytes(data)
    writer = CommitWriter(handle)
    writer.stage(path)
    return writer.commit(message, ALICE)


def test_read_at_revision_returns_old_bytes(handle, reader):
    before = handle.repo.head.commit.hexsha
    after = _commit_file(handle, "home.md", b"B", "[update] home")

    assert reader.read_at_revision("home.md", before) == "A"
    assert reader.read_at_revision("home.md", after) == "B"
    assert (handle.root / "home.md").read_text() == "B"


def test_read_nested_path(handle, reader):
    (handle.root / "guides").mkdir()
    revision = _commit_file(handle, "guides/setup.md", "Ünïcode".encode("utf-8"), "[create] guides/setup")

    assert reader.read_at_revision("guides/setup.md", revision) == "Ünïcode"


def test_unknown_revision(reader):
    with pytest.raises(RevisionNotFoundException) as exc_info:
        reader.read_at_revision("home.md", "0" * 40)

    assert exc_info.value.revision == "0" * 40


def test_revision_naming_no_commit(handle, reader):
    """Well-formed ids of missing objects and of non-commit objects are unknown revisions"""
    blob = (handle.repo.head.commit.tree / "home.md").hexsha

    for revision in ("1" * 40, "f" * 40, blob):
        with pytest.raises(RevisionNotFoundException):
            reader.read_at_revision("home.md", revision)


@pytest.mark.parametrize("revision", ["", "HEAD", "main", "abc123", "z" * 40])
def test_unparsable_revision(reader, revision):
    """Only full hashes are revision ids; refs and short hashes are not resolved"""
    with pytest.raises(RevisionNotFoundException):
        reader.read_at_revision("home.md", revision)


def test_path_absent_at_revision(handle, reader):
    root = handle.repo.head.commit.parents[0].hexsha

    with pytest.raises(PathNotFoundAtRevisionException) as exc_info:
        reader.read_at_revision("home.md", root)

    assert exc_info.value.path == "home.md"
    assert exc_info.value.revision == root


def test_directory_is_not_a_file(handle, reader):
    (handle.root / "guides").mkdir()
    revision = _commit_file(handle, "guides/setup.md", b"x", "[create] guides/setup")

    with pytest.raises(PathNotFoundAtRevisionException):
        reader.read_at_revision("guides", revision)


def test_non_utf8_blob(handle, reader):
    revision = _commit_file(handle, "binary.md", b"\xff\xfe\xfa", "[create] binary")

    assert reader.read_bytes("binary.md", revision) == b"\xff\xfe\xfa"
    with pytest.raises(EncodingException):
        reader.read_at_revision("binary.md", revision)
