"""
Tests for opening and cloning the pages repository.
"""
import shlex

import pytest
from git import Repo

from storage import RemoteConfig, RepositoryException, RepositoryHandle


def test_open_clones_when_missing(tmp_path, remote_config):
    """A missing working tree is cloned from the remote"""
    root = tmp_path / "pages"
    handle = RepositoryHandle.open(root, remote_config)

    assert (root / "home.md").read_text() == "A"
    assert handle.root == root.resolve()
    assert handle.remotes() == ["origin"]


def test_open_clones_into_existing_empty_directory(tmp_path, remote_config):
    root = tmp_path / "pages"
    root.mkdir()

    RepositoryHandle.open(root, remote_config)

    assert (root / "README.md").exists()


def test_open_existing_repository_does_not_clone(tmp_path, remote_config):
    """An existing repository is opened as-is"""
    root = tmp_path / "local"
    Repo.init(root)
    (root / "local-only.md").write_text("local")

    handle = RepositoryHandle.open(root, remote_config)

    assert handle.remotes() == []
    assert not (root / "home.md").exists()


def test_open_fails_when_clone_fails(tmp_path):
    config = RemoteConfig(url=str(tmp_path / "no-such-remote.git"), private_key=tmp_path / "key")

    with pytest.raises(RepositoryException):
        RepositoryHandle.open(tmp_path / "pages", config)


def test_relative_path(handle):
    assert handle.relative_path(handle.root / "home.md") == "home.md"
    assert handle.relative_path(handle.root / "guides" / "new.md") == "guides/new.md"
    assert handle.relative_path("guides/new.md") == "guides/new.md"


def test_relative_path_outside_repository(handle, tmp_path):
    with pytest.raises(RepositoryException):
        handle.relative_path(tmp_path / "elsewhere.md")

    with pytest.raises(RepositoryException):
        handle.relative_path(handle.root / ".." / "escape.md")

    with pytest.raises(RepositoryException):
        handle.relative_path(handle.root / ".git" / "config")


def test_locked_is_reentrant(handle):
    with handle.locked() as outer:
        with handle.locked() as inner:
            assert outer is inner


def test_ssh_command_uses_configured_keys(tmp_path):
    config = RemoteConfig(
        url="git@example.com:wiki/pages.git",
        private_key=tmp_path / "id_ed25519",
        public_key=tmp_path / "id_ed25519.pub",
    )

    args = shlex.split(config.environment()["GIT_SSH_COMMAND"])

    assert args[0] == "ssh"
    assert args[args.index("-i") + 1] == str(tmp_path / "id_ed25519")
    assert str(tmp_path / "id_ed25519.pub") in args
    assert "IdentitiesOnly=yes" in args
