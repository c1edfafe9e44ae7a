from typing import Sequence

from prsync.domain.models import BranchState

from prsync.application.publish_flow.contracts import (
    IssueDependencies,
    PublishFlowConfig,
    PublishFlowDependencies,
    PublishFlowResult,
    SyncDependencies,
)
from prsync.application.publish_flow.steps import (
    build_pull_request_result,
    commit_pending_changes,
    generate_message,
    open_issue,
    open_pull_request,
    push_current_branch,
    push_rebased_branch,
)


def sync_with_main(
    dependencies: SyncDependencies | PublishFlowDependencies,
    *,
    base_branch: str = "main",
) -> BranchState:
    """Push, fetch, rebase onto the base branch and force-push with lease.

    A failed initial push raises ``SyncError`` before anything is fetched; a
    conflicting rebase is aborted by the repository adapter and surfaces as
    ``ConflictError`` without the final push.
    """
    repository = dependencies.repository
    observe_step = dependencies.observe_step
    step = "resolve_branch"
    try:
        observe_step(step, "start")
        branch = repository.resolve_current_branch()
        observe_step(step, "success", branch)

        step = "push"
        observe_step(step, "start")
        push_current_branch(repository, branch)
        observe_step(step, "success")

        step = "fetch"
        observe_step(step, "start")
        repository.fetch_remote()
        observe_step(step, "success")

        step = "rebase"
        observe_step(step, "start")
        repository.rebase_onto_main()
        observe_step(step, "success", f"onto {base_branch}")

        step = "push_rebased"
        observe_step(step, "start")
        push_rebased_branch(repository, branch)
        observe_step(step, "success")
    except Exception as error:
        observe_step(step, "error", str(error))
        raise

    return BranchState(current_branch_name=branch, has_uncommitted_changes=False)


def publish_pull_request_to_main(
    config: PublishFlowConfig,
    dependencies: PublishFlowDependencies,
) -> PublishFlowResult:
    observe_step = dependencies.observe_step
    step = "auto_commit"
    try:
        observe_step(step, "start")
        committed = commit_pending_changes(config, dependencies.repository)
        observe_step(step, "success", "committed" if committed else "skipped")

        step = "resolve_branch"
        observe_step(step, "start")
        branch = dependencies.repository.resolve_current_branch()
        observe_step(step, "success", branch)

        step = "sync"
        sync_with_main(dependencies, base_branch=config.base_branch)

        step = "generate_message"
        observe_step(step, "start")
        message = generate_message(dependencies)
        observe_step(step, "success", message.title)

        step = "create_pull_request"
        observe_step(step, "start")
        resource = open_pull_request(config, dependencies, branch, message)
        observe_step(step, "success", resource.url)
    except Exception as error:
        # sync_with_main already reported its own failing step.
        if step != "sync":
            observe_step(step, "error", str(error))
        raise

    return build_pull_request_result(config, branch, message, resource)


def publish_issue(
    config: PublishFlowConfig,
    dependencies: IssueDependencies,
    *,
    title: str,
    body: str = "",
    labels: Sequence[str] = (),
) -> PublishFlowResult:
    step = "create_issue"
    dependencies.observe_step(step, "start")
    try:
        resource = open_issue(config, dependencies, title, body, tuple(labels))
    except Exception as error:
        dependencies.observe_step(step, "error", str(error))
        raise
    dependencies.observe_step(step, "success", resource.url)

    return PublishFlowResult(
        status="success",
        message=f"Successfully created issue #{resource.number}",
        title=title,
        number=resource.number,
        url=resource.url,
    )
