import logging
from dataclasses import dataclass
from typing import Any, Mapping

from openai import OpenAI

from prsync.domain.errors import ConfigurationError
from prsync.domain.message_parser import parse_generated_message
from prsync.domain.models import GeneratedMessage
from prsync.infrastructure.ai.prompts import SYSTEM_PROMPT, build_user_prompt
from prsync.infrastructure.observability.logging_utils import log_event


logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gpt-4o-mini"
_DEFAULT_MAX_TOKENS = 1000


@dataclass(frozen=True)
class OpenAIProvider:
    client: Any
    model: str = _DEFAULT_MODEL
    max_tokens: int = _DEFAULT_MAX_TOKENS

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str],
        *,
        max_tokens: int = _DEFAULT_MAX_TOKENS,
    ) -> "OpenAIProvider":
        api_key = environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY environment variable is not set")

        model = environ.get("OPENAI_MODEL") or _DEFAULT_MODEL
        client = OpenAI(api_key=api_key, max_retries=0)
        return cls(client=client, model=model, max_tokens=max_tokens)

    def summarize(self, diff_text: str) -> GeneratedMessage:
        log_event(
            logger,
            logging.INFO,
            "ai.summary.request",
            provider="openai",
            model=self.model,
            diff_length=len(diff_text),
        )
        response = self.client.chat.completions.create(
            model=self.model,
            temperature=0,
            max_tokens=self.max_tokens,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(diff_text)},
            ],
        )
        message = parse_generated_message(self._extract_content(response))
        log_event(
            logger,
            logging.INFO,
            "ai.summary.received",
            provider="openai",
            title=message.title,
            body_length=len(message.body),
        )
        return message

    def _extract_content(self, response: Any) -> str:
        if not response.choices:
            raise ValueError("OpenAI response did not contain choices")

        message = response.choices[0].message
        content = message.content if message else None
        if not isinstance(content, str):
            raise ValueError("OpenAI response did not contain message content")
        return content
