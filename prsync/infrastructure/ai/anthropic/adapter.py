import logging
from dataclasses import dataclass
from typing import Any, Mapping

from anthropic import Anthropic

from prsync.domain.errors import ConfigurationError
from prsync.domain.message_parser import parse_generated_message
from prsync.domain.models import GeneratedMessage
from prsync.infrastructure.ai.prompts import SYSTEM_PROMPT, build_user_prompt
from prsync.infrastructure.observability.logging_utils import log_event


logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "claude-3-5-sonnet-latest"
_DEFAULT_MAX_TOKENS = 1000

# The system block never changes between runs, so it is marked for prompt caching.
_SYSTEM_BLOCKS = [
    {
        "type": "text",
        "text": SYSTEM_PROMPT,
        "cache_control": {"type": "ephemeral"},
    }
]


@dataclass(frozen=True)
class AnthropicProvider:
    client: Any
    model: str = _DEFAULT_MODEL
    max_tokens: int = _DEFAULT_MAX_TOKENS

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str],
        *,
        max_tokens: int = _DEFAULT_MAX_TOKENS,
    ) -> "AnthropicProvider":
        api_key = environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY environment variable is not set")

        model = environ.get("ANTHROPIC_MODEL") or _DEFAULT_MODEL
        # Retry policy is owned by the caller; the SDK must not retry silently.
        client = Anthropic(api_key=api_key, max_retries=0)
        return cls(client=client, model=model, max_tokens=max_tokens)

    def summarize(self, diff_text: str) -> GeneratedMessage:
        log_event(
            logger,
            logging.INFO,
            "ai.summary.request",
            provider="anthropic",
            model=self.model,
            diff_length=len(diff_text),
        )
        response = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=0,
            system=_SYSTEM_BLOCKS,
            messages=[
                {
                    "role": "user",
                    "content": [{"type": "text", "text": build_user_prompt(diff_text)}],
                }
            ],
        )
        message = parse_generated_message(self._extract_text(response))
        log_event(
            logger,
            logging.INFO,
            "ai.summary.received",
            provider="anthropic",
            title=message.title,
            body_length=len(message.body),
        )
        return message

    def _extract_text(self, response: Any) -> str:
        for block in response.content or []:
            if getattr(block, "type", None) == "text":
                return block.text
        raise ValueError("Anthropic response did not contain a text content block")
