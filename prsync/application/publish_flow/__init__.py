from prsync.application.publish_flow.contracts import (
    IssueDependencies,
    PublishFlowConfig,
    PublishFlowDependencies,
    PublishFlowResult,
    SyncDependencies,
)
from prsync.application.publish_flow.use_case import (
    publish_issue,
    publish_pull_request_to_main,
    sync_with_main,
)

__all__ = [
    "IssueDependencies",
    "PublishFlowConfig",
    "PublishFlowDependencies",
    "PublishFlowResult",
    "SyncDependencies",
    "publish_issue",
    "publish_pull_request_to_main",
    "sync_with_main",
]
