from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class TokenPolicy:
    """Maps a branch identity to the hosting token used for API calls.

    Branches listed in ``branch_tokens`` use their own credential; every other
    branch falls back to ``default_token``.
    """

    default_token: str = field(repr=False)
    branch_tokens: Mapping[str, str] = field(default_factory=dict, repr=False)

    def select(self, branch: str) -> str:
        return self.branch_tokens.get(branch, self.default_token)

    def identity_for(self, branch: str) -> str:
        return branch if branch in self.branch_tokens else "default"
