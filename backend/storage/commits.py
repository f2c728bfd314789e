"""
Commit writer: stage, commit and push through the repository handle.
"""
import logging
from pathlib import PurePosixPath

from git import Actor, GitCommandError, PushInfo

from .exceptions import NoCommitException, PushRejectedException, RepositoryException
from .repository import RemoteConfig, RepositoryHandle

logger = logging.getLogger(__name__)

# Any of these flags on a PushInfo means the ref was not updated on the remote
PUSH_FAILURE_FLAGS = (
    PushInfo.ERROR | PushInfo.REJECTED | PushInfo.REMOTE_REJECTED | PushInfo.REMOTE_FAILURE
)


def _check_tracked_path(path: str) -> None:
    posix = PurePosixPath(path)
    if not path or posix.is_absolute() or ".." in posix.parts:
        raise RepositoryException(f"'{path}' is outside the tracked tree")


class CommitWriter:
    """Writes commits onto the current branch and pushes them to origin."""

    def __init__(self, handle: RepositoryHandle):
        self.handle = handle

    def stage(self, path: str) -> None:
        """
        Add a repository-relative path to the index and write the index.

        Raises:
            RepositoryException: If the path is outside the tree or the index can't be written
        """
        _check_tracked_path(path)

        with self.handle.locked() as repo:
            try:
                repo.index.add([path])
            except (OSError, ValueError, GitCommandError) as e:
                raise RepositoryException(f"Failed to stage '{path}': {e}") from e

    def unstage(self, path: str) -> None:
        """
        Reset the index entry for path to the branch tip.

        A path that is not in the tip is dropped from the index.
        """
        _check_tracked_path(path)

        with self.handle.locked() as repo:
            if not repo.head.is_valid():
                return
            try:
                repo.index.reset(paths=[path])
            except (OSError, ValueError, GitCommandError) as e:
                raise RepositoryException(f"Failed to unstage '{path}': {e}") from e

    def commit(self, message: str, identity: Actor) -> str:
        """
        Commit the current index on top of the branch tip.

        Args:
            message: Commit message
            identity: Used as both author and committer

        Returns:
            Hex hash of the new commit

        Raises:
            NoCommitException: If the branch has no commit to use as parent
            RepositoryException: If writing the tree or commit fails
        """
        with self.handle.locked() as repo:
            if not repo.head.is_valid():
                branch = None if repo.head.is_detached else repo.head.ref.name
                raise NoCommitException(branch)

            parent = repo.head.commit

            try:
                commit = repo.index.commit(
                    message,
                    parent_commits=[parent],
                    author=identity,
                    committer=identity,
                    head=True,
                    skip_hooks=True,
                )
            except (OSError, ValueError, GitCommandError) as e:
                raise RepositoryException(f"Git commit failed: {e}") from e

        logger.info(f"Committed {commit.hexsha[:7]} '{message}' as {identity.name} <{identity.email}>")
        return commit.hexsha

    def push(self, remote_config: RemoteConfig) -> None:
        """
        Push the current branch to origin under the same ref name.

        Raises:
            PushRejectedException: If the remote refused the ref update
            RepositoryException: If HEAD is detached or unresolvable, or the transport fails
        """
        with self.handle.locked() as repo:
            if repo.head.is_detached:
                raise RepositoryException("reference 'HEAD' doesn't point to a branch")
            if not repo.head.is_valid():
                raise RepositoryException(f"reference 'HEAD' ({repo.head.ref.path}) can't be resolved")

            branch = repo.head.ref.name
            ref = f"refs/heads/{branch}"

            try:
                origin = repo.remote("origin")
            except ValueError as e:
                raise RepositoryException(f"Remote 'origin' not configured: {e}") from e

            try:
                with repo.git.custom_environment(**remote_config.environment()):
                    results = origin.push(f"{ref}:{ref}")
            except GitCommandError as e:
                raise RepositoryException(f"Push to origin failed: {e}") from e

        for info in results:
            if info.flags & PUSH_FAILURE_FLAGS:
                raise PushRejectedException(ref, info.summary.strip())

        if not results:
            raise RepositoryException(f"Push of {ref} to origin reported no ref updates")

        logger.info(f"Pushed {ref} to origin")
