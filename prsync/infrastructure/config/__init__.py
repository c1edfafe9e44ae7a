from prsync.infrastructure.config.settings import DeploymentEnvironment, Settings, required_env

__all__ = [
    "DeploymentEnvironment",
    "Settings",
    "required_env",
]
