from prsync.application.ports import VersionControl
from prsync.domain.errors import RepositoryEnvironmentError, SyncError
from prsync.domain.models import (
    CreatedResource,
    GeneratedMessage,
    IssueRequest,
    PullRequestRequest,
)

from prsync.application.publish_flow.contracts import (
    IssueDependencies,
    PublishFlowConfig,
    PublishFlowDependencies,
    PublishFlowResult,
)


def commit_pending_changes(
    config: PublishFlowConfig,
    repository: VersionControl,
) -> bool:
    # Commit automatico de conveniencia: qualquer alteracao local vira um commit "sync".
    if not config.auto_commit or not repository.has_pending_changes():
        return False
    repository.commit_all(config.auto_commit_message)
    repository.push_current(force_with_lease=True)
    return True


def push_current_branch(repository: VersionControl, branch: str) -> None:
    # Publica o estado local antes do rebase; falha aqui indica trabalho nao commitado/nao publicavel.
    try:
        repository.push_current()
    except RepositoryEnvironmentError as error:
        raise SyncError(
            f"Failed to push {branch}. Please ensure your changes are committed and try again: {error}"
        ) from error


def push_rebased_branch(repository: VersionControl, branch: str) -> None:
    try:
        repository.push_current(force_with_lease=True)
    except RepositoryEnvironmentError as error:
        raise SyncError(f"Failed to push rebased {branch} with lease: {error}") from error


def generate_message(dependencies: PublishFlowDependencies) -> GeneratedMessage:
    # O diff e calculado depois do sync para refletir a branch ja rebaseada.
    diff_text = dependencies.repository.diff_against_main()
    message = dependencies.summarizer.summarize(diff_text)
    dependencies.observe_message(message)
    return message


def open_pull_request(
    config: PublishFlowConfig,
    dependencies: PublishFlowDependencies,
    branch: str,
    message: GeneratedMessage,
) -> CreatedResource:
    request = PullRequestRequest(
        owner=config.repository_owner,
        repo=config.repository_name,
        head=branch,
        base=config.base_branch,
    )
    resource = dependencies.hosting.create_pull_request(request, message)
    dependencies.observe_resource("pull_request", resource)
    return resource


def open_issue(
    config: PublishFlowConfig,
    dependencies: IssueDependencies,
    title: str,
    body: str,
    labels: tuple[str, ...],
) -> CreatedResource:
    request = IssueRequest(
        owner=config.repository_owner,
        repo=config.repository_name,
        title=title,
        body=body,
        labels=labels,
    )
    resource = dependencies.hosting.create_issue(request)
    dependencies.observe_resource("issue", resource)
    return resource


def build_pull_request_result(
    config: PublishFlowConfig,
    branch: str,
    message: GeneratedMessage,
    resource: CreatedResource,
) -> PublishFlowResult:
    return PublishFlowResult(
        status="success",
        message=f"Successfully created PR from {branch} to {config.base_branch}",
        branch=branch,
        title=message.title,
        number=resource.number,
        url=resource.url,
    )
