import logging
import subprocess
from pathlib import Path
from typing import Callable, Sequence

from prsync.domain.errors import (
    ConfigurationError,
    ConflictError,
    RepositoryEnvironmentError,
)
from prsync.domain.models import BranchState
from prsync.infrastructure.config.settings import DeploymentEnvironment
from prsync.infrastructure.observability.logging_utils import log_event, safe_message


logger = logging.getLogger(__name__)

CommandExecutor = Callable[[Sequence[str], Path | None], subprocess.CompletedProcess[str]]

DEFAULT_REMOTE = "origin"
DETACHED_HEAD = "HEAD"


def _execute_command(command: Sequence[str], cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    return subprocess.run(list(command), cwd=cwd, capture_output=True, text=True)


class GitRepository:
    """Version-control adapter that shells out to the git CLI.

    Every command that exits non-zero raises ``RepositoryEnvironmentError``;
    nothing is retried here.
    """

    def __init__(
        self,
        *,
        base_branch: str = "main",
        remote: str = DEFAULT_REMOTE,
        deployment: DeploymentEnvironment | None = None,
        cwd: Path | None = None,
        execute: CommandExecutor = _execute_command,
    ) -> None:
        self.base_branch = base_branch
        self.remote = remote
        self.deployment = deployment or DeploymentEnvironment()
        self.cwd = cwd
        self._execute = execute

    @property
    def base_ref(self) -> str:
        return f"{self.remote}/{self.base_branch}"

    def run(self, command: Sequence[str]) -> str:
        log_event(
            logger,
            logging.INFO,
            "repo.command.run",
            command=list(command),
            cwd=str(self.cwd) if self.cwd else None,
        )
        result = self._execute(command, self.cwd)
        if result.returncode != 0:
            stdout = safe_message(result.stdout.strip()) if result.stdout else ""
            stderr = safe_message(result.stderr.strip()) if result.stderr else ""
            if stdout:
                log_event(logger, logging.ERROR, "repo.command.stdout", output=stdout)
            if stderr:
                log_event(logger, logging.ERROR, "repo.command.stderr", output=stderr)
            raise RepositoryEnvironmentError(
                safe_message(
                    f"Command failed (exit_code={result.returncode}): {' '.join(command)}"
                ),
                command=command,
                returncode=result.returncode,
                stderr=stderr,
            )
        return result.stdout or ""

    def resolve_current_branch(self) -> str:
        if self.deployment.active:
            if not self.deployment.branch:
                raise ConfigurationError(
                    "Unable to determine branch name in deployment environment: "
                    f"{self.deployment.branch_variable} is not set"
                )
            log_event(
                logger,
                logging.INFO,
                "repo.branch.resolved",
                branch=self.deployment.branch,
                source="deployment",
            )
            return self.deployment.branch

        try:
            branch = self.run(["git", "rev-parse", "--abbrev-ref", "HEAD"]).strip()
        except RepositoryEnvironmentError as error:
            log_event(logger, logging.ERROR, "repo.branch.resolve_failed", error=str(error))
            raise RepositoryEnvironmentError(
                "Unable to determine branch name",
                command=error.command,
                returncode=error.returncode,
                stderr=error.stderr,
            ) from error

        if not branch or branch == DETACHED_HEAD:
            raise RepositoryEnvironmentError(
                "Unable to determine branch name: HEAD is detached",
                command=["git", "rev-parse", "--abbrev-ref", "HEAD"],
                returncode=0,
            )
        log_event(logger, logging.INFO, "repo.branch.resolved", branch=branch, source="git")
        return branch

    def has_pending_changes(self) -> bool:
        return bool(self.run(["git", "status", "--porcelain"]).strip())

    def branch_state(self) -> BranchState:
        return BranchState(
            current_branch_name=self.resolve_current_branch(),
            has_uncommitted_changes=self.has_pending_changes(),
        )

    def commit_all(self, message: str) -> None:
        self.run(["git", "add", "."])
        self.run(["git", "commit", "-m", message])

    def push_current(self, force_with_lease: bool = False) -> None:
        if force_with_lease:
            self.run(["git", "push", "--force-with-lease"])
            return
        branch = self.resolve_current_branch()
        self.run(["git", "push", self.remote, branch])

    def fetch_remote(self) -> None:
        self.run(["git", "fetch", self.remote])

    def rebase_onto_main(self) -> None:
        try:
            self.run(["git", "rebase", self.base_ref])
        except RepositoryEnvironmentError as error:
            log_event(
                logger,
                logging.WARNING,
                "repo.rebase.conflict",
                base=self.base_ref,
                stderr=error.stderr,
            )
            self._abort_rebase()
            message = (
                f"Please manually rebase your branch on {self.base_branch} "
                "and resolve conflicts before creating PR"
            )
            if error.stderr:
                message = f"{message} (git: {error.stderr})"
            raise ConflictError(message) from error

    def _abort_rebase(self) -> None:
        try:
            self.run(["git", "rebase", "--abort"])
        except RepositoryEnvironmentError as abort_error:
            log_event(logger, logging.ERROR, "repo.rebase.abort_failed", error=str(abort_error))
        else:
            log_event(logger, logging.INFO, "repo.rebase.aborted", base=self.base_ref)

    def diff_against_main(self) -> str:
        diff = self.run(["git", "diff", self.base_ref])
        log_event(logger, logging.INFO, "repo.diff.collected", base=self.base_ref, length=len(diff))
        return diff
