import logging

from prsync.domain.errors import ConflictError, HostingApiError, SyncError
from prsync.domain.models import CreatedResource, GeneratedMessage
from prsync.infrastructure.observability.logging_utils import log_event


logger = logging.getLogger(__name__)


def classify_failure(error: Exception) -> str:
    if isinstance(error, ConflictError):
        return "rebase_conflict"
    if isinstance(error, SyncError):
        return "push_rejected"
    if isinstance(error, HostingApiError):
        return "hosting_api"
    return "unexpected"


def observe_generated_message(message: GeneratedMessage) -> None:
    log_event(
        logger,
        logging.INFO,
        "workflow.message.generated",
        title=message.title,
        body_length=len(message.body),
    )


def observe_created_resource(kind: str, resource: CreatedResource) -> None:
    log_event(
        logger,
        logging.INFO,
        "workflow.resource.created",
        kind=kind,
        number=resource.number,
        url=resource.url,
    )


def observe_workflow_step(step: str, status: str, detail: str | None = None) -> None:
    level = logging.ERROR if status == "error" else logging.INFO
    log_event(
        logger,
        level,
        "workflow.step",
        step=step,
        status=status,
        detail=detail,
    )
