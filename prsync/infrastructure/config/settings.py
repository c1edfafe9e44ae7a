import os
from dataclasses import dataclass, field
from typing import Mapping

from prsync.domain.errors import ConfigurationError
from prsync.domain.token_policy import TokenPolicy


_DEFAULT_BASE_BRANCH = "main"
_DEFAULT_API_URL = "https://api.github.com"
_DEFAULT_WEB_URL = "https://github.com"
_DEFAULT_AI_PROVIDER = "anthropic"
_DEFAULT_MAX_TOKENS = 1000
_DEFAULT_AUTO_COMMIT_MESSAGE = "sync"
_DEFAULT_DEPLOYMENT_MARKER = "VERCEL"
_DEFAULT_DEPLOYMENT_BRANCH_VARIABLE = "VERCEL_GIT_COMMIT_REF"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def required_env(name: str, environ: Mapping[str, str] | None = None) -> str:
    source = os.environ if environ is None else environ
    value = source.get(name)
    if not value:
        raise ConfigurationError(f"Missing required environment variable: {name}")
    return value


def _parse_bool(name: str, raw_value: str | None, default: bool) -> bool:
    if raw_value is None or not raw_value.strip():
        return default
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: '{raw_value}'")


def _parse_int(name: str, raw_value: str | None, default: int) -> int:
    if raw_value is None or not raw_value.strip():
        return default
    try:
        value = int(raw_value)
    except ValueError as error:
        raise ConfigurationError(f"Invalid integer for {name}: '{raw_value}'") from error
    if value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {value}")
    return value


def parse_branch_tokens(raw_value: str | None, environ: Mapping[str, str]) -> dict[str, str]:
    """Parse ``branch=ENV_VAR`` pairs into a branch -> token mapping.

    The right-hand side names the environment variable that holds the token,
    so secrets never appear in the mapping itself, e.g.
    ``GITHUB_BRANCH_TOKENS="raffi=RAFFI_PAT_TOKEN"``.
    """
    branch_tokens: dict[str, str] = {}
    if not raw_value:
        return branch_tokens

    for entry in raw_value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        branch, separator, token_variable = entry.partition("=")
        branch = branch.strip()
        token_variable = token_variable.strip()
        if not separator or not branch or not token_variable:
            raise ConfigurationError(
                f"Invalid GITHUB_BRANCH_TOKENS entry '{entry}'; expected branch=ENV_VAR"
            )
        branch_tokens[branch] = environ.get(token_variable, "")
    return branch_tokens


@dataclass(frozen=True)
class DeploymentEnvironment:
    """Managed deployment that provides the branch name without a git checkout."""

    active: bool = False
    branch: str | None = None
    branch_variable: str = _DEFAULT_DEPLOYMENT_BRANCH_VARIABLE

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "DeploymentEnvironment":
        marker = environ.get("PRSYNC_DEPLOYMENT_MARKER", _DEFAULT_DEPLOYMENT_MARKER)
        branch_variable = environ.get(
            "PRSYNC_DEPLOYMENT_BRANCH_VARIABLE",
            _DEFAULT_DEPLOYMENT_BRANCH_VARIABLE,
        )
        return cls(
            active=bool(environ.get(marker)),
            branch=environ.get(branch_variable) or None,
            branch_variable=branch_variable,
        )


@dataclass(frozen=True)
class Settings:
    owner: str | None
    repo: str | None
    base_branch: str
    token_policy: TokenPolicy = field(repr=False)
    deployment: DeploymentEnvironment
    ai_provider: str = _DEFAULT_AI_PROVIDER
    max_tokens: int = _DEFAULT_MAX_TOKENS
    api_base_url: str = _DEFAULT_API_URL
    web_base_url: str = _DEFAULT_WEB_URL
    auto_commit: bool = True
    auto_commit_message: str = _DEFAULT_AUTO_COMMIT_MESSAGE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        source = dict(os.environ if environ is None else environ)
        default_token = source.get("PAT_TOKEN") or source.get("GITHUB_TOKEN") or ""
        token_policy = TokenPolicy(
            default_token=default_token,
            branch_tokens=parse_branch_tokens(source.get("GITHUB_BRANCH_TOKENS"), source),
        )
        return cls(
            owner=source.get("GH_OWNER") or None,
            repo=source.get("GH_REPO") or None,
            base_branch=source.get("GH_BASE_BRANCH") or _DEFAULT_BASE_BRANCH,
            token_policy=token_policy,
            deployment=DeploymentEnvironment.from_env(source),
            ai_provider=(source.get("AI_PROVIDER") or _DEFAULT_AI_PROVIDER).strip().lower(),
            max_tokens=_parse_int("PRSYNC_MAX_TOKENS", source.get("PRSYNC_MAX_TOKENS"), _DEFAULT_MAX_TOKENS),
            api_base_url=(source.get("GITHUB_API_URL") or _DEFAULT_API_URL).rstrip("/"),
            web_base_url=(source.get("GITHUB_WEB_URL") or _DEFAULT_WEB_URL).rstrip("/"),
            auto_commit=_parse_bool("PRSYNC_AUTO_COMMIT", source.get("PRSYNC_AUTO_COMMIT"), True),
            auto_commit_message=(
                source.get("PRSYNC_AUTO_COMMIT_MESSAGE") or _DEFAULT_AUTO_COMMIT_MESSAGE
            ),
        )

    def require_repository(self) -> tuple[str, str]:
        if not self.owner:
            raise ConfigurationError("Missing required environment variable: GH_OWNER")
        if not self.repo:
            raise ConfigurationError("Missing required environment variable: GH_REPO")
        return self.owner, self.repo

    def sensitive_values(self) -> list[str]:
        return [self.token_policy.default_token, *self.token_policy.branch_tokens.values()]
