import unittest
from types import SimpleNamespace

from emotionscore import providers as pr
from emotionscore.runtime_settings import build_runtime_settings


class FakeAsyncClient:
    chat_actions = {}
    calls = []

    def __init__(self, host):
        self.host = host

    async def chat(self, model, messages, stream=False, **kwargs):
        FakeAsyncClient.calls.append({"host": self.host, "model": model, "messages": messages, "kwargs": kwargs})
        action = self.chat_actions.get((self.host, model))
        if isinstance(action, Exception):
            raise action
        if action is None:
            return {"message": {"content": "default"}}
        return action


class TestExtractPlainText(unittest.TestCase):
    def test_plain_text_passes_through(self):
        self.assertEqual(pr.extract_plain_text('  "Just an answer."  '), "Just an answer.")

    def test_json_envelope(self):
        raw = '{"response": "Here is the answer.", "followUpQuestions": ["More?"]}'
        self.assertEqual(pr.extract_plain_text(raw), "Here is the answer.")

    def test_fenced_json(self):
        raw = '```json\n{"response": "Fenced answer."}\n```'
        self.assertEqual(pr.extract_plain_text(raw), "Fenced answer.")

    def test_broken_json_fragment(self):
        raw = '{"response": "She said \\"hi\\"\\nthen left", "followUpQuestions": [oops'
        self.assertEqual(pr.extract_plain_text(raw), 'She said "hi"\nthen left')

    def test_truncated_envelope(self):
        raw = '{"response": "This reply was cut off mid'
        self.assertEqual(pr.extract_plain_text(raw), "This reply was cut off mid")

    def test_structured_mapping(self):
        self.assertEqual(pr.extract_plain_text({"answer": "Mapped."}), "Mapped.")

    def test_unrecoverable_output_raises(self):
        for raw in ("", "{}", '{"followUpQuestions": []}', {"citations": []}, None):
            with self.subTest(raw=raw):
                with self.assertRaises(pr.MalformedOutputError):
                    pr.extract_plain_text(raw)


class TestGenerationResult(unittest.TestCase):
    def test_variants_share_plain_text(self):
        plain = pr.GenerationResult.plain("  hello ")
        structured = pr.GenerationResult.structured("cited answer", ["https://example.org"])
        self.assertEqual(plain.kind, "plain")
        self.assertEqual(plain.plain_text(), "hello")
        self.assertEqual(structured.kind, "structured")
        self.assertEqual(structured.citations, ("https://example.org",))
        self.assertEqual(structured.plain_text(), "cited answer")

    def test_empty_result_is_malformed(self):
        with self.assertRaises(pr.MalformedOutputError):
            pr.GenerationResult.plain("   ").plain_text()

    def test_request_messages(self):
        bare = pr.GenerationRequest(tier=pr.TIER_BARE, prompt="hi")
        self.assertEqual(bare.as_messages(), [{"role": "user", "content": "hi"}])
        history = pr.GenerationRequest(
            tier=pr.TIER_HISTORY,
            messages=[{"role": "user", "content": "a"}, {"role": "assistant", "content": "b"}],
        )
        self.assertEqual(len(history.as_messages()), 2)


class TestOllamaProvider(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.original_async_client = pr.AsyncClient
        pr.AsyncClient = FakeAsyncClient
        FakeAsyncClient.chat_actions = {}
        FakeAsyncClient.calls = []

    def tearDown(self):
        pr.AsyncClient = self.original_async_client

    async def test_generate_returns_message_content(self):
        host = "http://custom:11434"
        FakeAsyncClient.chat_actions[(host, "m1")] = {"message": {"content": " Hello from m1 "}}
        provider = pr.OllamaProvider(name="local", model="m1", host=host + "/")
        result = await provider.generate(pr.GenerationRequest(tier=pr.TIER_BARE, prompt="hi"))
        self.assertEqual(result.plain_text(), "Hello from m1")
        self.assertEqual(FakeAsyncClient.calls[0]["host"], host)
        self.assertEqual(FakeAsyncClient.calls[0]["messages"], [{"role": "user", "content": "hi"}])

    async def test_generate_reads_attribute_style_response(self):
        host = pr.DEFAULT_OLLAMA_HOST
        FakeAsyncClient.chat_actions[(host, "m1")] = SimpleNamespace(message=SimpleNamespace(content="attr ok"))
        provider = pr.OllamaProvider(name="local", model="m1")
        result = await provider.generate(pr.GenerationRequest(tier=pr.TIER_BARE, prompt="hi"))
        self.assertEqual(result.plain_text(), "attr ok")

    async def test_json_envelope_is_unwrapped(self):
        host = pr.DEFAULT_OLLAMA_HOST
        FakeAsyncClient.chat_actions[(host, "m1")] = {"message": {"content": '```json\n{"response": "unwrapped"}\n```'}}
        provider = pr.OllamaProvider(name="local", model="m1")
        result = await provider.generate(pr.GenerationRequest(tier=pr.TIER_CONTEXT, prompt="hi"))
        self.assertEqual(result.plain_text(), "unwrapped")

    async def test_transport_failure_becomes_provider_error(self):
        host = pr.DEFAULT_OLLAMA_HOST
        FakeAsyncClient.chat_actions[(host, "m1")] = ConnectionError("refused")
        provider = pr.OllamaProvider(name="local", model="m1")
        with self.assertRaises(pr.ProviderError) as captured:
            await provider.generate(pr.GenerationRequest(tier=pr.TIER_BARE, prompt="hi"))
        self.assertEqual(captured.exception.provider, "local")
        self.assertEqual(captured.exception.metadata["tier"], pr.TIER_BARE)

    async def test_empty_completion_is_malformed(self):
        host = pr.DEFAULT_OLLAMA_HOST
        FakeAsyncClient.chat_actions[(host, "m1")] = {"message": {"content": "   "}}
        provider = pr.OllamaProvider(name="local", model="m1")
        with self.assertRaises(pr.MalformedOutputError):
            await provider.generate(pr.GenerationRequest(tier=pr.TIER_BARE, prompt="hi"))

    async def test_options_are_forwarded(self):
        provider = pr.OllamaProvider(name="local", model="m1", options={"temperature": 0.2})
        await provider.generate(pr.GenerationRequest(tier=pr.TIER_BARE, prompt="hi"))
        self.assertEqual(FakeAsyncClient.calls[0]["kwargs"], {"options": {"temperature": 0.2}})


class TestBuildProviders(unittest.TestCase):
    def test_entries_are_filtered_and_sorted(self):
        settings = build_runtime_settings(
            config_data={
                "runtime": {
                    "providers": {
                        "default_ollama_host": "http://shared:11434",
                        "entries": [
                            {"name": "low", "model": "small", "priority": 1},
                            {"name": "off", "model": "big", "priority": 9, "enabled": False},
                            {"name": "nomodel", "priority": 5},
                            {"name": "remote", "type": "mystery", "model": "x"},
                            {"name": "high", "model": "large", "priority": 5, "host": "http://gpu:11434"},
                            "not-a-mapping",
                        ],
                    }
                }
            },
            env_data={},
        )
        with self.assertLogs("emotionscore.providers", level="WARNING"):
            providers = pr.build_providers(settings)
        self.assertEqual([provider.name for provider in providers], ["high", "low"])
        self.assertEqual(providers[0].host, "http://gpu:11434")
        self.assertEqual(providers[1].host, "http://shared:11434")

    def test_no_entries(self):
        self.assertEqual(pr.build_providers(build_runtime_settings(config_data={}, env_data={})), [])


if __name__ == "__main__":
    unittest.main()
