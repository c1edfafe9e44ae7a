import subprocess
import unittest
from pathlib import Path
from typing import Sequence

from prsync.domain.errors import (
    ConfigurationError,
    ConflictError,
    RepositoryEnvironmentError,
)
from prsync.infrastructure.config.settings import DeploymentEnvironment
from prsync.infrastructure.repo.operations import GitRepository


class _RecordingExecutor:
    def __init__(self, responses: dict[tuple[str, ...], tuple[int, str, str]] | None = None) -> None:
        self.responses = responses or {}
        self.commands: list[tuple[str, ...]] = []

    def __call__(
        self,
        command: Sequence[str],
        cwd: Path | None = None,
    ) -> subprocess.CompletedProcess[str]:
        key = tuple(command)
        self.commands.append(key)
        returncode, stdout, stderr = self.responses.get(key, (0, "", ""))
        return subprocess.CompletedProcess(list(command), returncode, stdout, stderr)


_BRANCH_QUERY = ("git", "rev-parse", "--abbrev-ref", "HEAD")


class GitRepositoryBranchTests(unittest.TestCase):
    def test_resolves_branch_from_git(self) -> None:
        executor = _RecordingExecutor({_BRANCH_QUERY: (0, "feature-x\n", "")})
        repository = GitRepository(execute=executor)

        self.assertEqual(repository.resolve_current_branch(), "feature-x")
        self.assertEqual(executor.commands, [_BRANCH_QUERY])

    def test_deployment_branch_wins_without_calling_git(self) -> None:
        executor = _RecordingExecutor({_BRANCH_QUERY: (0, "feature-x\n", "")})
        repository = GitRepository(
            execute=executor,
            deployment=DeploymentEnvironment(active=True, branch="preview-branch"),
        )

        self.assertEqual(repository.resolve_current_branch(), "preview-branch")
        self.assertEqual(executor.commands, [])

    def test_deployment_without_branch_is_a_configuration_error(self) -> None:
        repository = GitRepository(
            execute=_RecordingExecutor(),
            deployment=DeploymentEnvironment(active=True, branch=None),
        )

        with self.assertRaises(ConfigurationError) as raised_error:
            repository.resolve_current_branch()

        self.assertIn("VERCEL_GIT_COMMIT_REF", str(raised_error.exception))

    def test_git_failure_is_an_environment_error(self) -> None:
        executor = _RecordingExecutor(
            {_BRANCH_QUERY: (128, "", "fatal: not a git repository")}
        )
        repository = GitRepository(execute=executor)

        with self.assertRaises(RepositoryEnvironmentError) as raised_error:
            repository.resolve_current_branch()

        self.assertIn("Unable to determine branch name", str(raised_error.exception))
        self.assertEqual(raised_error.exception.returncode, 128)

    def test_detached_head_is_an_environment_error(self) -> None:
        repository = GitRepository(execute=_RecordingExecutor({_BRANCH_QUERY: (0, "HEAD\n", "")}))

        with self.assertRaises(RepositoryEnvironmentError):
            repository.resolve_current_branch()


class GitRepositoryCommandTests(unittest.TestCase):
    def test_pending_changes_follow_porcelain_status(self) -> None:
        dirty = GitRepository(
            execute=_RecordingExecutor({("git", "status", "--porcelain"): (0, " M a.txt\n", "")})
        )
        clean = GitRepository(execute=_RecordingExecutor())

        self.assertTrue(dirty.has_pending_changes())
        self.assertFalse(clean.has_pending_changes())

    def test_branch_state_combines_branch_and_status(self) -> None:
        executor = _RecordingExecutor(
            {
                _BRANCH_QUERY: (0, "feature-x\n", ""),
                ("git", "status", "--porcelain"): (0, "?? new.txt\n", ""),
            }
        )

        state = GitRepository(execute=executor).branch_state()

        self.assertEqual(state.current_branch_name, "feature-x")
        self.assertTrue(state.has_uncommitted_changes)

    def test_commit_all_stages_then_commits(self) -> None:
        executor = _RecordingExecutor()

        GitRepository(execute=executor).commit_all("sync")

        self.assertEqual(
            executor.commands,
            [("git", "add", "."), ("git", "commit", "-m", "sync")],
        )

    def test_plain_push_targets_current_branch_on_origin(self) -> None:
        executor = _RecordingExecutor({_BRANCH_QUERY: (0, "feature-x\n", "")})

        GitRepository(execute=executor).push_current()

        self.assertEqual(executor.commands[-1], ("git", "push", "origin", "feature-x"))

    def test_force_push_uses_lease(self) -> None:
        executor = _RecordingExecutor()

        GitRepository(execute=executor).push_current(force_with_lease=True)

        self.assertEqual(executor.commands, [("git", "push", "--force-with-lease")])

    def test_fetch_and_diff_use_remote_base(self) -> None:
        executor = _RecordingExecutor(
            {("git", "diff", "origin/develop"): (0, "diff --git a/x b/x\n+1\n", "")}
        )
        repository = GitRepository(base_branch="develop", execute=executor)

        repository.fetch_remote()
        diff = repository.diff_against_main()

        self.assertEqual(diff, "diff --git a/x b/x\n+1\n")
        self.assertEqual(
            executor.commands,
            [("git", "fetch", "origin"), ("git", "diff", "origin/develop")],
        )

    def test_failing_command_raises_with_stderr(self) -> None:
        executor = _RecordingExecutor({("git", "fetch", "origin"): (1, "", "could not resolve host")})

        with self.assertRaises(RepositoryEnvironmentError) as raised_error:
            GitRepository(execute=executor).fetch_remote()

        self.assertEqual(raised_error.exception.command, ("git", "fetch", "origin"))
        self.assertEqual(raised_error.exception.stderr, "could not resolve host")


class GitRepositoryRebaseTests(unittest.TestCase):
    def test_successful_rebase_does_not_abort(self) -> None:
        executor = _RecordingExecutor()

        GitRepository(execute=executor).rebase_onto_main()

        self.assertEqual(executor.commands, [("git", "rebase", "origin/main")])

    def test_conflict_aborts_before_raising(self) -> None:
        executor = _RecordingExecutor(
            {("git", "rebase", "origin/main"): (1, "CONFLICT (content)", "")}
        )

        with self.assertRaises(ConflictError) as raised_error:
            GitRepository(execute=executor).rebase_onto_main()

        self.assertEqual(
            executor.commands,
            [("git", "rebase", "origin/main"), ("git", "rebase", "--abort")],
        )
        self.assertIn("resolve conflicts", str(raised_error.exception))

    def test_conflict_still_raised_when_abort_fails(self) -> None:
        executor = _RecordingExecutor(
            {
                ("git", "rebase", "origin/main"): (1, "", "conflict"),
                ("git", "rebase", "--abort"): (128, "", "no rebase in progress"),
            }
        )

        with self.assertRaises(ConflictError):
            GitRepository(execute=executor).rebase_onto_main()

        self.assertIn(("git", "rebase", "--abort"), executor.commands)

    def test_rebase_failure_reports_git_stderr(self) -> None:
        executor = _RecordingExecutor(
            {
                ("git", "rebase", "origin/main"): (128, "", "fatal: invalid upstream 'origin/main'"),
                ("git", "rebase", "--abort"): (128, "", "fatal: No rebase in progress?"),
            }
        )

        with self.assertRaises(ConflictError) as raised_error:
            GitRepository(execute=executor).rebase_onto_main()

        self.assertIn("fatal: invalid upstream 'origin/main'", str(raised_error.exception))


if __name__ == "__main__":
    unittest.main()
