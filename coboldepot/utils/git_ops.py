"""Git operations — probe the git executable and shallow-clone repos.

GitPython runs git as a child process and waits for it; each call below
returns only after that process has been reaped.
"""

from __future__ import annotations

from pathlib import Path

from coboldepot.errors import ProcessError, ToolUnavailableError


def _gitpython():
    """Import GitPython, which refuses to load without a usable git binary."""
    try:
        import git
    except ImportError as e:
        raise ToolUnavailableError(f"git executable not found in PATH ({e})") from e
    return git


class GitClient:
    """The two git operations the installer needs."""

    def probe(self) -> str:
        """Run ``git version`` and return its output.

        Raises:
            ToolUnavailableError: git is missing or exits non-zero.
        """
        git = _gitpython()
        try:
            return git.Git().version()
        except git.exc.CommandError as e:
            raise ToolUnavailableError(f"git executable not found in PATH ({e})") from e

    def shallow_clone(self, url: str, target: Path) -> None:
        """Clone ``url`` into ``target`` with a depth of one commit.

        Raises:
            ProcessError: git could not be spawned or exited non-zero.
        """
        git = _gitpython()
        try:
            git.Repo.clone_from(url, str(target), depth=1)
        except git.exc.GitCommandNotFound as e:
            raise ProcessError(f"Unable to spawn git clone: {e}") from e
        except git.exc.GitCommandError as e:
            exit_code = e.status if isinstance(e.status, int) else None
            stderr = (e.stderr or "").strip()
            message = f"git clone exited with code {exit_code}"
            if stderr:
                message = f"{message}: {stderr}"
            raise ProcessError(message, exit_code=exit_code) from e

