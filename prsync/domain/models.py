from dataclasses import dataclass


@dataclass(frozen=True)
class BranchState:
    current_branch_name: str
    has_uncommitted_changes: bool


@dataclass(frozen=True)
class GeneratedMessage:
    title: str
    body: str = ""


@dataclass(frozen=True)
class PullRequestRequest:
    owner: str
    repo: str
    head: str
    base: str


@dataclass(frozen=True)
class IssueRequest:
    owner: str
    repo: str
    title: str
    body: str
    labels: tuple[str, ...] = ()


@dataclass(frozen=True)
class CreatedResource:
    number: int
    url: str
