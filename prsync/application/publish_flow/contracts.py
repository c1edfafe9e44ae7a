from dataclasses import dataclass
from typing import Callable

from prsync.application.ports import DiffSummarizer, HostingClient, VersionControl
from prsync.domain.models import CreatedResource, GeneratedMessage


def _noop_observe_message(_: GeneratedMessage) -> None:
    return None


def _noop_observe_resource(_: str, __: CreatedResource) -> None:
    return None


def _noop_observe_step(_: str, __: str, ___: str | None = None) -> None:
    return None


@dataclass(frozen=True)
class PublishFlowConfig:
    repository_owner: str
    repository_name: str
    base_branch: str = "main"
    auto_commit: bool = True
    auto_commit_message: str = "sync"


@dataclass(frozen=True)
class PublishFlowDependencies:
    repository: VersionControl
    summarizer: DiffSummarizer
    hosting: HostingClient
    observe_message: Callable[[GeneratedMessage], None] = _noop_observe_message
    observe_resource: Callable[[str, CreatedResource], None] = _noop_observe_resource
    observe_step: Callable[[str, str, str | None], None] = _noop_observe_step


@dataclass(frozen=True)
class SyncDependencies:
    repository: VersionControl
    observe_step: Callable[[str, str, str | None], None] = _noop_observe_step


@dataclass(frozen=True)
class PublishFlowResult:
    status: str
    message: str
    branch: str | None = None
    title: str | None = None
    number: int | None = None
    url: str | None = None


@dataclass(frozen=True)
class IssueDependencies:
    hosting: HostingClient
    observe_resource: Callable[[str, CreatedResource], None] = _noop_observe_resource
    observe_step: Callable[[str, str, str | None], None] = _noop_observe_step
