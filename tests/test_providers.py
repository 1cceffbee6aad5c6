import os
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import requests

from memograph.config import Settings
from memograph.core.domain.note import Note
from memograph.core.errors import CalendarError, ConfigurationError, ProviderError
from memograph.core.services.generation_service import GenerationService
from memograph.infrastructure.calendar.google_calendar import GoogleCalendarClient
from memograph.infrastructure.embedding.gemini_embedder import GeminiEmbeddingProvider
from memograph.infrastructure.llm.gemini_provider import GeminiFlashProvider, configure, parse_response
from memograph.infrastructure.llm.ollama_provider import OllamaGemmaProvider
from memograph.infrastructure.speech.gemini_tts import GeminiSpeechSynthesizer


def http_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} Error")
    return response


class TestGemini(unittest.TestCase):
    def test_missing_api_key(self):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigurationError):
                configure(None)

    @patch("memograph.infrastructure.llm.gemini_provider.genai")
    def test_generate_json_mode(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.return_value = SimpleNamespace(text="[]")
        provider = GeminiFlashProvider(api_key="key", model_name="m", rate_limit_rpm=0)

        self.assertEqual(provider.generate("cluster these", json_mode=True), "[]")
        kwargs = mock_genai.GenerativeModel.return_value.generate_content.call_args[1]
        self.assertEqual(kwargs["generation_config"], {"response_mime_type": "application/json"})

    @patch("memograph.infrastructure.llm.gemini_provider.genai")
    def test_generate_with_response_schema(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.return_value = SimpleNamespace(text="[]")
        provider = GeminiFlashProvider(api_key="key", rate_limit_rpm=0)
        schema = {"type": "ARRAY", "items": {"type": "STRING"}}

        provider.generate("cluster these", json_mode=True, response_schema=schema)
        kwargs = mock_genai.GenerativeModel.return_value.generate_content.call_args[1]
        self.assertEqual(kwargs["generation_config"]["response_schema"], schema)

    @patch("memograph.infrastructure.llm.gemini_provider.genai")
    def test_generate_failure(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.side_effect = RuntimeError("quota")
        provider = GeminiFlashProvider(api_key="key", rate_limit_rpm=0)
        with self.assertRaises(ProviderError):
            provider.generate("hi")

    def test_parse_response(self):
        call_part = SimpleNamespace(function_call=SimpleNamespace(name="searchNotes", args={"query": "eggs"}), text="")
        text_part = SimpleNamespace(function_call=SimpleNamespace(name="", args=None), text="Looking...")
        response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[text_part, call_part]))])

        turn = parse_response(response)
        self.assertEqual(turn.text, "Looking...")
        self.assertEqual(len(turn.function_calls), 1)
        self.assertEqual(turn.function_calls[0].name, "searchNotes")
        self.assertEqual(turn.function_calls[0].args, {"query": "eggs"})

    def test_parse_empty_response(self):
        turn = parse_response(SimpleNamespace(candidates=[]))
        self.assertIsNone(turn.text)
        self.assertEqual(turn.function_calls, [])

    @patch("memograph.infrastructure.embedding.gemini_embedder.configure")
    @patch("memograph.infrastructure.embedding.gemini_embedder.genai")
    def test_embedding(self, mock_genai, mock_configure):
        mock_genai.embed_content.return_value = {"embedding": [0.5, 0.25]}
        embedder = GeminiEmbeddingProvider(api_key="key")
        self.assertEqual(embedder.embed("Title: a\nContent: b"), [0.5, 0.25])
        self.assertEqual(embedder.get_dimension(), 768)

    @patch("memograph.infrastructure.embedding.gemini_embedder.configure")
    @patch("memograph.infrastructure.embedding.gemini_embedder.genai")
    def test_embedding_failure_returns_empty(self, mock_genai, mock_configure):
        mock_genai.embed_content.side_effect = RuntimeError("rate limited")
        embedder = GeminiEmbeddingProvider(api_key="key")
        self.assertEqual(embedder.embed("text"), [])


class TestOllama(unittest.TestCase):
    @patch("memograph.infrastructure.llm.ollama_provider.requests.post")
    def test_generate(self, mock_post):
        mock_post.return_value = http_response(payload={"response": "ok"})
        provider = OllamaGemmaProvider(model_name="gemma3:12b")

        self.assertEqual(provider.generate("hi", json_mode=True), "ok")
        payload = mock_post.call_args[1]["json"]
        self.assertEqual(payload["format"], "json")
        self.assertFalse(payload["stream"])

    @patch("memograph.infrastructure.llm.ollama_provider.requests.post")
    def test_clusters_from_object_reply(self, mock_post):
        mock_post.return_value = http_response(payload={
            "response": '{"clusters": [{"name": "Food", "noteIds": ["n1"]}]}'
        })
        notes = [Note(id="n1", title="Eggs", content="Whisk", created_at=1)]

        clusters = GenerationService(OllamaGemmaProvider()).generate_clusters(notes)

        self.assertEqual(mock_post.call_args[1]["json"]["format"], "json")
        self.assertEqual([(c.name, c.note_ids) for c in clusters], [("Food", ["n1"])])

    @patch("memograph.infrastructure.llm.ollama_provider.requests.post")
    def test_connection_error(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(ProviderError):
            OllamaGemmaProvider().generate("hi")


class TestSpeechSynthesizer(unittest.TestCase):
    @patch("memograph.infrastructure.speech.gemini_tts.requests.post")
    def test_synthesize(self, mock_post):
        mock_post.return_value = http_response(payload={
            "candidates": [{"content": {"parts": [{"inlineData": {"data": "AAAA"}}]}}]
        })
        synth = GeminiSpeechSynthesizer(api_key="key")

        self.assertEqual(synth.synthesize("Hello"), "AAAA")
        payload = mock_post.call_args[1]["json"]
        voice = payload["generationConfig"]["speechConfig"]["voiceConfig"]["prebuiltVoiceConfig"]
        self.assertEqual(voice["voiceName"], "Kore")

    @patch("memograph.infrastructure.speech.gemini_tts.requests.post")
    def test_synthesize_failure(self, mock_post):
        mock_post.return_value = http_response(payload={"candidates": []})
        self.assertIsNone(GeminiSpeechSynthesizer(api_key="key").synthesize("Hello"))


class TestGoogleCalendar(unittest.TestCase):
    def setUp(self):
        self.env = patch.dict(os.environ, {}, clear=True)
        self.env.start()

    def tearDown(self):
        self.env.stop()

    def test_not_signed_in(self):
        client = GoogleCalendarClient()
        self.assertFalse(client.is_signed_in())
        result = client.create_event("Lunch tomorrow")
        self.assertFalse(result["success"])

    def test_sign_in_requires_client_id(self):
        with self.assertRaises(ConfigurationError):
            GoogleCalendarClient(refresh_token="r").sign_in()

    @patch("memograph.infrastructure.calendar.google_calendar.requests.get")
    @patch("memograph.infrastructure.calendar.google_calendar.requests.post")
    def test_sign_in_and_create_event(self, mock_post, mock_get):
        mock_post.side_effect = [
            http_response(payload={"access_token": "tok"}),
            http_response(payload={"id": "ev42"}),
        ]
        mock_get.return_value = http_response(payload={"email": "me@example.com"})
        client = GoogleCalendarClient(client_id="cid", refresh_token="r")

        result = client.create_event("Dentist Friday 10am")

        self.assertEqual(result, {"success": True, "eventId": "ev42"})
        self.assertEqual(client.user_email, "me@example.com")
        quick_add = mock_post.call_args_list[1]
        self.assertIn("/calendars/primary/events/quickAdd", quick_add[0][0])
        self.assertEqual(quick_add[1]["params"], {"text": "Dentist Friday 10am"})
        self.assertEqual(quick_add[1]["headers"], {"Authorization": "Bearer tok"})

    @patch("memograph.infrastructure.calendar.google_calendar.requests.post")
    def test_rejected_refresh_token(self, mock_post):
        mock_post.return_value = http_response(400, {"error": "invalid_grant"})
        client = GoogleCalendarClient(client_id="cid", refresh_token="bad")
        with self.assertRaises(CalendarError):
            client.sign_in()

    @patch("memograph.infrastructure.calendar.google_calendar.requests.post")
    def test_create_event_http_error(self, mock_post):
        mock_post.return_value = http_response(401)
        result = GoogleCalendarClient(access_token="expired").create_event("Lunch")
        self.assertFalse(result["success"])


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.gemini_model, "gemini-2.5-flash-lite")
        self.assertEqual(settings.store_path, "memograph_store.json")
        self.assertFalse(settings.calendar_configured)

    def test_overrides(self):
        env = {
            "MEMOGRAPH_STORE": "sqlite",
            "GEMINI_RATE_LIMIT_RPM": "not-a-number",
            "GOOGLE_CLIENT_ID": "cid",
            "GOOGLE_REFRESH_TOKEN": "r",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.store_path, "memograph.db")
        self.assertEqual(settings.rate_limit_rpm, 60)
        self.assertTrue(settings.calendar_configured)


if __name__ == '__main__':
    unittest.main()
