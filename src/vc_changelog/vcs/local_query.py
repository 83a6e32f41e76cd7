"""
Querier backed by the local ``git`` executable.

Commits are read with ``git log`` using a custom format that emits the
hash, the subject and the body of each commit followed by an ``==END==``
marker line. All subprocess calls go through :meth:`LocalQuerier._run`
so that unit tests can mock them easily.
"""

from __future__ import annotations

import datetime
import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from vc_changelog.config.loader import CONFIG_FILE_NAME
from vc_changelog.vcs.query import Querier, QueryError, RawCommit


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


LOG_FORMAT = "%H%n%s%n%b%n==END=="
RECORD_SEPARATOR = "\n==END==\n"


def normalize_origin(origin: str) -> str:
    """Turn an SSH remote such as ``git@host:owner/repo.git`` into an HTTPS URL."""
    origin = origin.strip()
    if origin.startswith("git@"):
        path = origin[len("git@"):]
        if path.endswith(".git"):
            path = path[: -len(".git")]
        origin = "https://" + path.replace(":", "/")
    return origin


def parse_log_output(output: str) -> List[RawCommit]:
    """Split ``git log`` output in :data:`LOG_FORMAT` into ``(hash, message)`` pairs.

    Records with fewer than two lines carry no message and are dropped.
    """
    commits: List[RawCommit] = []
    for record in output.split(RECORD_SEPARATOR):
        if not record:
            continue
        lines = record.split("\n")
        if len(lines) < 2:
            continue
        commits.append((lines[0], "\n".join(lines[1:])))
    return commits


class LocalQuerier(Querier):
    """Querier for a repository checked out on the local filesystem.

    Parameters
    ----------
    git_dir : str, optional
        Path to the ``.git`` directory.
    work_tree : str, optional
        Path to the working tree containing the ``.git`` directory.
    """

    def __init__(self, git_dir: str = "", work_tree: str = "") -> None:
        self.git_dir = git_dir
        self.work_tree = work_tree

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def workdir(self) -> Path:
        """Return the directory holding the repository's ``.clog.toml``."""
        if self.git_dir:
            return Path(self.git_dir).parent
        if self.work_tree:
            return Path(self.work_tree)
        return Path(".")

    def _global_args(self) -> List[str]:
        args: List[str] = []
        if self.git_dir:
            args.append(f"--git-dir={self.git_dir}")
        elif self.work_tree:
            args.append(f"--git-dir={Path(self.work_tree) / '.git'}")
        if self.work_tree:
            args.append(f"--work-tree={self.work_tree}")
        return args

    def _run(self, args: List[str]) -> str:
        """Run a Git command and return its standard output.

        Raises
        ------
        QueryError
            If git cannot be started or exits with a non-zero status.
        """
        full_cmd = ["git"] + self._global_args() + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            logger.error("Failed to run git: %s", exc)
            raise QueryError(f"Failed to run git: {exc}") from exc

        if result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise QueryError(result.stderr.strip() or result.stdout.strip())
        return result.stdout

    # ------------------------------------------------------------------
    # Repository metadata
    # ------------------------------------------------------------------
    def get_origin(self) -> str:
        return normalize_origin(self._run(["remote", "get-url", "origin"]))

    def get_latest_commit(self) -> str:
        return self._run(["rev-parse", "HEAD"]).strip()

    def get_latest_tag(self) -> str:
        return self._run(["rev-list", "--tags", "--max-count=1"]).strip()

    def get_latest_tag_version(self) -> str:
        return self._run(["describe", "--tags", "--abbrev=0"]).strip()

    def get_config(self) -> Optional[bytes]:
        path = self.workdir() / CONFIG_FILE_NAME
        if not path.exists():
            logger.debug("No %s found in %s", CONFIG_FILE_NAME, self.workdir())
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            logger.error("Failed to read %s: %s", path, exc)
            raise QueryError(f"Failed to read {path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Commits
    # ------------------------------------------------------------------
    def get_commits(self, from_ref: str = "", to_ref: str = "HEAD") -> List[RawCommit]:
        revision = f"{from_ref}..{to_ref}" if from_ref else to_ref
        output = self._run(["log", "-E", f"--format={LOG_FORMAT}", revision])
        return parse_log_output(output)

    def get_commit_range(self, since: datetime.datetime, until: datetime.datetime) -> List[RawCommit]:
        output = self._run(
            [
                "log",
                "-E",
                f"--format={LOG_FORMAT}",
                f"--since={since.isoformat()}",
                f"--until={until.isoformat()}",
            ]
        )
        return parse_log_output(output)
