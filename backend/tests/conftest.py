import pytest
import sys
import os
from pathlib import Path

from git import Actor, Repo

# Add the parent directory to Python path so we can import backend modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from auth.registry import UserRegistry  # noqa: E402
from renderer import ConversionError  # noqa: E402
from storage import PageStore, RemoteConfig, RepositoryHandle, Role, User  # noqa: E402

# Configure pytest for async tests
pytest_plugins = ('pytest_asyncio',)

SEED_AUTHOR = Actor("Seed", "seed@example.com")
BRANCH = "main"

# Content the fake renderer refuses to convert
INVALID_MARKUP = "<<invalid>>"


class FakeRenderer:
    """Renderer stand-in that records calls and rejects INVALID_MARKUP."""

    def __init__(self):
        self.calls = []

    def render(self, content, fmt=None):
        self.calls.append((content, fmt))
        if INVALID_MARKUP in content:
            raise ConversionError("unbalanced markup")
        return f"<p>{content}</p>"


class DictRegistry:
    """Plain dict lookup, for tests that don't need the real registry."""

    def __init__(self, *users):
        self.users = {user.email: user for user in users}

    def lookup(self, email):
        return self.users.get(email)


def reject_pushes(remote_path: Path, reason: str = "wiki is read-only") -> None:
    """Install a pre-receive hook that declines every push."""
    hook = remote_path / "hooks" / "pre-receive"
    hook.write_text(f"#!/bin/sh\necho '{reason}' >&2\nexit 1\n")
    hook.chmod(0o755)


@pytest.fixture
def remote_path(tmp_path):
    """
    Bare remote with two commits on main: a root commit adding README.md,
    then one adding home.md = "A".
    """
    remote = tmp_path / "remote.git"
    Repo.init(remote, bare=True, initial_branch=BRANCH)

    seed_path = tmp_path / "seed"
    seed = Repo.init(seed_path, initial_branch=BRANCH)

    (seed_path / "README.md").write_text("Wiki pages\n")
    seed.index.add(["README.md"])
    seed.index.commit("Initial commit", author=SEED_AUTHOR, committer=SEED_AUTHOR)

    (seed_path / "home.md").write_text("A")
    seed.index.add(["home.md"])
    seed.index.commit("[create] home", author=SEED_AUTHOR, committer=SEED_AUTHOR)

    seed.create_remote("origin", str(remote))
    seed.remote("origin").push(f"refs/heads/{BRANCH}:refs/heads/{BRANCH}")

    return remote


@pytest.fixture
def remote_config(tmp_path, remote_path):
    # Local remotes never read the key, it only has to be configured
    return RemoteConfig(url=str(remote_path), private_key=tmp_path / "id_ed25519")


@pytest.fixture
def handle(tmp_path, remote_config):
    """Repository handle cloned from the seeded remote."""
    return RepositoryHandle.open(tmp_path / "pages", remote_config)


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def store(handle, remote_config, renderer):
    return PageStore(handle, remote_config, renderer)


@pytest.fixture
def alice():
    return User(
        name="Alice Liddell",
        email="alice@example.com",
        url="https://example.com/alice",
        approved=True,
        roles=[Role.ADMINISTRATOR],
    )


@pytest.fixture
def bob():
    """A user who is not in the registry."""
    return User(name="Bob", email="bob@example.com", url="https://example.com/bob", approved=True)


@pytest.fixture
def registry(alice):
    registry = UserRegistry()
    registry.put(alice)
    return registry
