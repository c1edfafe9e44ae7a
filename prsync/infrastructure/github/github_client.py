import logging
from typing import Any, Callable

import requests
from jsonschema import ValidationError, validate

from prsync.domain.errors import ConfigurationError, HostingApiError
from prsync.domain.models import (
    CreatedResource,
    GeneratedMessage,
    IssueRequest,
    PullRequestRequest,
)
from prsync.domain.token_policy import TokenPolicy
from prsync.infrastructure.observability.logging_utils import log_event


logger = logging.getLogger(__name__)

_DEFAULT_API_URL = "https://api.github.com"
_DEFAULT_WEB_URL = "https://github.com"

# Only the fields this client reads are constrained; GitHub returns many more.
_CREATED_RESOURCE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["number"],
    "properties": {
        "number": {"type": "integer", "minimum": 1},
    },
}


class GitHubClient:
    def __init__(
        self,
        *,
        token_policy: TokenPolicy,
        current_branch: Callable[[], str],
        api_base_url: str = _DEFAULT_API_URL,
        web_base_url: str = _DEFAULT_WEB_URL,
        session: requests.Session | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.token_policy = token_policy
        self.current_branch = current_branch
        self.api_base_url = api_base_url.rstrip("/")
        self.web_base_url = web_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github.v3+json",
                "Content-Type": "application/json",
            }
        )

    def create_pull_request(
        self,
        request: PullRequestRequest,
        message: GeneratedMessage,
    ) -> CreatedResource:
        log_event(
            logger,
            logging.INFO,
            "github.pr.create",
            owner=request.owner,
            repo=request.repo,
            head=request.head,
            base=request.base,
            title=message.title,
        )
        payload = {
            "title": message.title,
            "body": message.body,
            "head": request.head,
            "base": request.base,
        }
        data = self._post(
            f"/repos/{request.owner}/{request.repo}/pulls",
            payload,
            event="github.pr.create_failed",
            failure_message="Failed to create PR",
        )
        number = data["number"]
        resource = CreatedResource(
            number=number,
            url=f"{self.web_base_url}/{request.owner}/{request.repo}/pull/{number}",
        )
        log_event(logger, logging.INFO, "github.pr.created", number=number, url=resource.url)
        return resource

    def create_issue(self, request: IssueRequest) -> CreatedResource:
        log_event(
            logger,
            logging.INFO,
            "github.issue.create",
            owner=request.owner,
            repo=request.repo,
            title=request.title,
            labels=list(request.labels),
        )
        payload = {
            "title": request.title,
            "body": request.body,
            "labels": list(request.labels),
        }
        data = self._post(
            f"/repos/{request.owner}/{request.repo}/issues",
            payload,
            event="github.issue.create_failed",
            failure_message="Failed to create issue",
        )
        number = data["number"]
        resource = CreatedResource(
            number=number,
            url=f"{self.web_base_url}/{request.owner}/{request.repo}/issues/{number}",
        )
        log_event(logger, logging.INFO, "github.issue.created", number=number, url=resource.url)
        return resource

    def _authorization_header(self) -> dict[str, str]:
        branch = self.current_branch()
        token = self.token_policy.select(branch)
        if not token:
            identity = self.token_policy.identity_for(branch)
            raise ConfigurationError(
                f"No GitHub token configured for identity '{identity}' (branch '{branch}')"
            )
        log_event(
            logger,
            logging.INFO,
            "github.token.selected",
            branch=branch,
            identity=self.token_policy.identity_for(branch),
        )
        return {"Authorization": f"Bearer {token}"}

    def _post(
        self,
        path: str,
        payload: dict[str, object],
        *,
        event: str,
        failure_message: str,
    ) -> dict[str, Any]:
        headers = self._authorization_header()
        request_kwargs: dict[str, Any] = {"json": payload, "headers": headers}
        if self.timeout_seconds is not None:
            request_kwargs["timeout"] = self.timeout_seconds

        response = self.session.post(f"{self.api_base_url}{path}", **request_kwargs)
        if not 200 <= response.status_code < 300:
            error_text = response.text
            log_event(
                logger,
                logging.ERROR,
                event,
                status_code=response.status_code,
                details=error_text,
            )
            raise HostingApiError(
                f"{failure_message}: {error_text}",
                status_code=response.status_code,
                body=error_text,
            )

        data = response.json()
        try:
            validate(instance=data, schema=_CREATED_RESOURCE_SCHEMA)
        except ValidationError as error:
            raise HostingApiError(
                f"{failure_message}: unexpected response payload ({error.message})",
                status_code=response.status_code,
                body=response.text,
            ) from error
        return data
