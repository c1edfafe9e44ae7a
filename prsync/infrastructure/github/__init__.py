from prsync.infrastructure.github.github_client import GitHubClient

__all__ = ["GitHubClient"]
