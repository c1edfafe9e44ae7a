import unittest
from types import SimpleNamespace
from unittest.mock import Mock, patch

from prsync.domain.errors import ConfigurationError
from prsync.infrastructure.ai.anthropic import AnthropicProvider
from prsync.infrastructure.ai.openai import OpenAIProvider
from prsync.infrastructure.ai.prompts import SYSTEM_PROMPT
from prsync.infrastructure.ai.provider_factory import build_ai_provider_runtime
from prsync.infrastructure.config.settings import Settings


def _anthropic_response(*blocks: SimpleNamespace) -> SimpleNamespace:
    return SimpleNamespace(content=list(blocks))


def _text_block(text: str) -> SimpleNamespace:
    return SimpleNamespace(type="text", text=text)


class AnthropicProviderTests(unittest.TestCase):
    def test_summarize_sends_deterministic_cached_request(self) -> None:
        client = Mock()
        client.messages.create.return_value = _anthropic_response(
            _text_block("Add login flow\n\nThis PR adds OAuth login.")
        )
        provider = AnthropicProvider(client=client, model="claude-test", max_tokens=500)

        message = provider.summarize("diff --git a/a.txt b/a.txt\n+hello")

        self.assertEqual(message.title, "Add login flow")
        self.assertEqual(message.body, "This PR adds OAuth login.")
        kwargs = client.messages.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "claude-test")
        self.assertEqual(kwargs["temperature"], 0)
        self.assertEqual(kwargs["max_tokens"], 500)
        self.assertEqual(kwargs["system"][0]["text"], SYSTEM_PROMPT)
        self.assertEqual(kwargs["system"][0]["cache_control"], {"type": "ephemeral"})
        user_turn = kwargs["messages"][0]
        self.assertEqual(user_turn["role"], "user")
        self.assertTrue(user_turn["content"][0]["text"].endswith("diff --git a/a.txt b/a.txt\n+hello"))

    def test_first_text_block_is_used(self) -> None:
        client = Mock()
        client.messages.create.return_value = _anthropic_response(
            SimpleNamespace(type="tool_use", id="x"),
            _text_block("Title only"),
        )

        message = AnthropicProvider(client=client).summarize("diff")

        self.assertEqual(message.title, "Title only")
        self.assertEqual(message.body, "")

    def test_response_without_text_raises(self) -> None:
        client = Mock()
        client.messages.create.return_value = _anthropic_response(SimpleNamespace(type="tool_use"))

        with self.assertRaises(ValueError):
            AnthropicProvider(client=client).summarize("diff")

    def test_transport_errors_propagate_unchanged(self) -> None:
        client = Mock()
        failure = ConnectionError("network down")
        client.messages.create.side_effect = failure

        with self.assertRaises(ConnectionError) as raised_error:
            AnthropicProvider(client=client).summarize("diff")

        self.assertIs(raised_error.exception, failure)

    def test_missing_api_key_fails_before_client_creation(self) -> None:
        with patch("prsync.infrastructure.ai.anthropic.adapter.Anthropic") as anthropic_class:
            with self.assertRaises(ConfigurationError):
                AnthropicProvider.from_env({})

        anthropic_class.assert_not_called()

    def test_from_env_disables_sdk_retries(self) -> None:
        with patch("prsync.infrastructure.ai.anthropic.adapter.Anthropic") as anthropic_class:
            provider = AnthropicProvider.from_env(
                {"ANTHROPIC_API_KEY": "sk-ant-test", "ANTHROPIC_MODEL": "claude-x"},
                max_tokens=256,
            )

        anthropic_class.assert_called_once_with(api_key="sk-ant-test", max_retries=0)
        self.assertEqual(provider.model, "claude-x")
        self.assertEqual(provider.max_tokens, 256)


class OpenAIProviderTests(unittest.TestCase):
    def test_summarize_uses_chat_completions(self) -> None:
        client = Mock()
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Fix typo\n\nCorrects README."))]
        )
        provider = OpenAIProvider(client=client, model="gpt-test")

        message = provider.summarize("diff")

        self.assertEqual(message.title, "Fix typo")
        self.assertEqual(message.body, "Corrects README.")
        kwargs = client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["temperature"], 0)
        self.assertEqual(kwargs["messages"][0], {"role": "system", "content": SYSTEM_PROMPT})

    def test_empty_choices_raise(self) -> None:
        client = Mock()
        client.chat.completions.create.return_value = SimpleNamespace(choices=[])

        with self.assertRaises(ValueError):
            OpenAIProvider(client=client).summarize("diff")

    def test_missing_api_key_is_a_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            OpenAIProvider.from_env({})


class ProviderFactoryTests(unittest.TestCase):
    def test_defaults_to_anthropic(self) -> None:
        environ = {"ANTHROPIC_API_KEY": "sk-ant-test"}
        settings = Settings.from_env(environ)

        with patch("prsync.infrastructure.ai.anthropic.adapter.Anthropic"):
            runtime = build_ai_provider_runtime(settings, environ)

        self.assertEqual(runtime.provider, "anthropic")
        self.assertIsInstance(runtime.adapter, AnthropicProvider)
        self.assertEqual(runtime.api_key, "sk-ant-test")

    def test_selects_openai(self) -> None:
        environ = {"AI_PROVIDER": "OpenAI", "OPENAI_API_KEY": "sk-openai-test"}
        settings = Settings.from_env(environ)

        with patch("prsync.infrastructure.ai.openai.adapter.OpenAI"):
            runtime = build_ai_provider_runtime(settings, environ)

        self.assertEqual(runtime.provider, "openai")
        self.assertIsInstance(runtime.adapter, OpenAIProvider)

    def test_unknown_provider_is_rejected(self) -> None:
        environ = {"AI_PROVIDER": "llama"}

        with self.assertRaises(ConfigurationError) as raised_error:
            build_ai_provider_runtime(Settings.from_env(environ), environ)

        self.assertIn("anthropic, openai", str(raised_error.exception))


if __name__ == "__main__":
    unittest.main()
