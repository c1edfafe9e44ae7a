import argparse
import logging
import os
import sys
import uuid
from typing import Mapping, Sequence

from dotenv import load_dotenv

from prsync import __version__
from prsync.application.publish_flow import (
    IssueDependencies,
    PublishFlowConfig,
    PublishFlowDependencies,
    SyncDependencies,
    publish_issue,
    publish_pull_request_to_main,
    sync_with_main,
)
from prsync.domain.errors import PrSyncError
from prsync.infrastructure.ai.provider_factory import build_ai_provider_runtime
from prsync.infrastructure.config.settings import Settings
from prsync.infrastructure.github.github_client import GitHubClient
from prsync.infrastructure.observability.context import reset_run_id, set_run_id
from prsync.infrastructure.observability.logging_utils import (
    configure_logging,
    log_event,
    register_sensitive_values,
)
from prsync.infrastructure.observability.workflow_observer import (
    classify_failure,
    observe_created_resource,
    observe_generated_message,
    observe_workflow_step,
)
from prsync.infrastructure.repo.operations import GitRepository


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prsync",
        description="Rebase the current branch onto main and open an AI-described pull request.",
    )
    parser.add_argument(
        "--sync",
        action="store_true",
        help="Only push, fetch and rebase onto the base branch (no PR creation)",
    )
    parser.add_argument(
        "--issue",
        metavar="TITLE",
        help="Create an issue with this title instead of a pull request",
    )
    parser.add_argument("--body", default="", help="Issue body (with --issue)")
    parser.add_argument(
        "--label",
        dest="labels",
        action="append",
        default=[],
        help="Issue label, may be repeated (with --issue)",
    )
    parser.add_argument("--version", action="version", version=f"prsync {__version__}")
    return parser


def build_repository(settings: Settings) -> GitRepository:
    return GitRepository(base_branch=settings.base_branch, deployment=settings.deployment)


def build_flow_config(settings: Settings) -> PublishFlowConfig:
    owner, repo = settings.require_repository()
    return PublishFlowConfig(
        repository_owner=owner,
        repository_name=repo,
        base_branch=settings.base_branch,
        auto_commit=settings.auto_commit,
        auto_commit_message=settings.auto_commit_message,
    )


def build_github_client(settings: Settings, repository: GitRepository) -> GitHubClient:
    return GitHubClient(
        token_policy=settings.token_policy,
        current_branch=repository.resolve_current_branch,
        api_base_url=settings.api_base_url,
        web_base_url=settings.web_base_url,
    )


def build_publish_dependencies(
    settings: Settings,
    repository: GitRepository,
    environ: Mapping[str, str],
) -> PublishFlowDependencies:
    ai_runtime = build_ai_provider_runtime(settings, environ)
    register_sensitive_values(ai_runtime.api_key)

    return PublishFlowDependencies(
        repository=repository,
        summarizer=ai_runtime.adapter,
        hosting=build_github_client(settings, repository),
        observe_message=observe_generated_message,
        observe_resource=observe_created_resource,
        observe_step=observe_workflow_step,
    )


def run_sync(settings: Settings) -> int:
    repository = build_repository(settings)
    try:
        state = sync_with_main(
            SyncDependencies(repository=repository, observe_step=observe_workflow_step),
            base_branch=settings.base_branch,
        )
    except Exception as error:
        log_event(
            logger,
            logging.ERROR,
            "cli.sync.failed",
            reason=classify_failure(error),
            error=str(error),
        )
        return 1

    log_event(
        logger,
        logging.INFO,
        "cli.sync.end",
        branch=state.current_branch_name,
        message=f"Successfully synced with {settings.base_branch}",
    )
    return 0


def run_publish(settings: Settings, environ: Mapping[str, str]) -> int:
    repository = build_repository(settings)
    config = build_flow_config(settings)
    dependencies = build_publish_dependencies(settings, repository, environ)
    try:
        result = publish_pull_request_to_main(config, dependencies)
    except Exception as error:
        log_event(
            logger,
            logging.ERROR,
            "cli.publish.failed",
            reason=classify_failure(error),
            error=str(error),
        )
        raise

    log_event(
        logger,
        logging.INFO,
        "cli.publish.end",
        status=result.status,
        message=result.message,
        url=result.url,
    )
    return 0


def run_issue(
    settings: Settings,
    *,
    title: str,
    body: str,
    labels: Sequence[str],
) -> int:
    repository = build_repository(settings)
    config = build_flow_config(settings)
    dependencies = IssueDependencies(
        hosting=build_github_client(settings, repository),
        observe_resource=observe_created_resource,
        observe_step=observe_workflow_step,
    )
    result = publish_issue(config, dependencies, title=title, body=body, labels=labels)
    log_event(logger, logging.INFO, "cli.issue.end", message=result.message, url=result.url)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()
    configure_logging()

    token = set_run_id(uuid.uuid4().hex[:12])
    try:
        environ = dict(os.environ)
        try:
            settings = Settings.from_env(environ)
        except PrSyncError as error:
            log_event(logger, logging.ERROR, "cli.config.invalid", error=str(error))
            return 1
        register_sensitive_values(*settings.sensitive_values())

        if args.sync:
            log_event(logger, logging.INFO, "cli.sync.start", base=settings.base_branch)
            return run_sync(settings)
        if args.issue:
            log_event(logger, logging.INFO, "cli.issue.start", title=args.issue)
            return run_issue(
                settings,
                title=args.issue,
                body=args.body,
                labels=args.labels,
            )

        log_event(logger, logging.INFO, "cli.publish.start", base=settings.base_branch)
        return run_publish(settings, environ)
    finally:
        reset_run_id(token)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
