from typing import Protocol

from prsync.domain.models import (
    CreatedResource,
    GeneratedMessage,
    IssueRequest,
    PullRequestRequest,
)


class VersionControl(Protocol):
    def resolve_current_branch(self) -> str:
        """Return the branch the workflow operates on."""

    def has_pending_changes(self) -> bool:
        """True when the working tree has any uncommitted modification."""

    def commit_all(self, message: str) -> None:
        """Stage every change and commit it on the current branch."""

    def push_current(self, force_with_lease: bool = False) -> None:
        """Push the current branch to its remote."""

    def fetch_remote(self) -> None:
        """Update the local view of the remote without touching the working tree."""

    def rebase_onto_main(self) -> None:
        """Replay the branch onto the fetched base; abort and raise ConflictError on conflict."""

    def diff_against_main(self) -> str:
        """Textual diff between the current branch and the remote base."""


class DiffSummarizer(Protocol):
    def summarize(self, diff_text: str) -> GeneratedMessage:
        """Generate a pull request title/body from a diff."""


class HostingClient(Protocol):
    def create_pull_request(
        self,
        request: PullRequestRequest,
        message: GeneratedMessage,
    ) -> CreatedResource:
        """Open a pull request and return its number and web URL."""

    def create_issue(self, request: IssueRequest) -> CreatedResource:
        """Open an issue and return its number and web URL."""
