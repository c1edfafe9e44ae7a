from prsync.infrastructure.observability.logging_utils import configure_logging, log_event
from prsync.infrastructure.observability.workflow_observer import (
    classify_failure,
    observe_created_resource,
    observe_generated_message,
    observe_workflow_step,
)

__all__ = [
    "configure_logging",
    "log_event",
    "classify_failure",
    "observe_created_resource",
    "observe_generated_message",
    "observe_workflow_step",
]
