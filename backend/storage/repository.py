"""
Repository handle for the wiki's git working tree.

Owns the single GitPython Repo object for the process. A Repo is not safe
to share between threads, so every repository operation runs inside
RepositoryHandle.locked().
"""
import logging
import shlex
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, List, Optional, Union

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from .exceptions import RepositoryException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteConfig:
    """Where the pages repository is cloned from and pushed to."""

    url: str
    private_key: Path
    public_key: Optional[Path] = None

    def ssh_command(self) -> str:
        """
        Build the GIT_SSH_COMMAND used for clone and push.

        ssh looks for <private_key>.pub by itself; a separately stored public
        key is offered as an extra identity so an agent holding the key can
        be used. No passphrase support.
        """
        parts = ["ssh", "-i", str(self.private_key)]
        if self.public_key is not None:
            parts += ["-i", str(self.public_key)]
        parts += ["-o", "IdentitiesOnly=yes", "-o", "BatchMode=yes"]
        return " ".join(shlex.quote(p) for p in parts)

    def environment(self) -> Dict[str, str]:
        return {"GIT_SSH_COMMAND": self.ssh_command()}


class RepositoryHandle:
    """
    Exclusive-access wrapper around the pages repository.

    Exactly one handle exists per process. It is never closed while the
    process runs.
    """

    def __init__(self, repo: Repo):
        self.repo = repo
        self.root = Path(repo.working_tree_dir).resolve()
        self._lock = threading.RLock()

    @classmethod
    def open(cls, root: Union[str, Path], remote_config: RemoteConfig) -> "RepositoryHandle":
        """
        Open the repository at root, cloning it first if it does not exist.

        Args:
            root: Working tree directory
            remote_config: Remote to clone from when root holds no repository

        Returns:
            RepositoryHandle

        Raises:
            RepositoryException: If opening fails for another reason or the clone fails
        """
        root = Path(root)

        try:
            repo = Repo(root)
        except (NoSuchPathError, InvalidGitRepositoryError):
            repo = None
        except Exception as e:
            raise RepositoryException(f"Failed to open git repository at {root}: {e}") from e

        if repo is not None:
            for remote in repo.remotes:
                logger.info(f"Found remote: {remote.name}")
            return cls(repo)

        logger.info(f"No repository at {root}, cloning {remote_config.url}")
        root.mkdir(parents=True, exist_ok=True)

        try:
            repo = Repo.clone_from(remote_config.url, root, env=remote_config.environment())
        except GitCommandError as e:
            raise RepositoryException(f"Failed to clone {remote_config.url} into {root}: {e}") from e

        return cls(repo)

    @contextmanager
    def locked(self) -> Iterator[Repo]:
        """
        Hold the repository lock and yield the underlying Repo.

        Re-entrant, so an orchestrating caller can hold it across several
        operations that each take it again.
        """
        with self._lock:
            yield self.repo

    def remotes(self) -> List[str]:
        """List remote names."""
        with self.locked() as repo:
            return [remote.name for remote in repo.remotes]

    def relative_path(self, filepath: Union[str, Path]) -> str:
        """
        Convert a filesystem path to a repository-relative POSIX path.

        Raises:
            RepositoryException: If filepath does not lie under the working tree
        """
        path = Path(filepath)
        if not path.is_absolute():
            path = self.root / path

        # resolve() on the parent only, so a file that does not exist yet still maps
        resolved = path.parent.resolve() / path.name
        try:
            relative = resolved.relative_to(self.root)
        except ValueError:
            raise RepositoryException(f"'{filepath}' is outside the repository at {self.root}")

        if not relative.parts or relative.parts[0] == ".git":
            raise RepositoryException(f"'{filepath}' is not a trackable path in {self.root}")

        return PurePosixPath(*relative.parts).as_posix()
