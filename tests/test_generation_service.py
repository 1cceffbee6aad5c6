import unittest
from unittest.mock import MagicMock

from memograph.core.domain.note import Note
from memograph.core.errors import ProviderError
from memograph.core.services.generation_service import GenerationService
from memograph.core.services.prompts import NO_RELEVANT_NOTES_ANSWER, parse_cluster_response


def make_note(note_id):
    return Note(id=note_id, title=f"Title {note_id}", content="body", created_at=1)


class TestGenerateAnswer(unittest.TestCase):
    def setUp(self):
        self.mock_llm = MagicMock()
        self.service = GenerationService(self.mock_llm)
        self.notes = [make_note("a"), make_note("b"), make_note("c"), make_note("d")]

    def test_no_relevant_notes_skips_model(self):
        result = self.service.generate_answer("q", self.notes, {"a": 0.1, "b": 0.2})
        self.assertEqual(result, {"answer": NO_RELEVANT_NOTES_ANSWER, "usedNoteIds": []})
        self.mock_llm.generate.assert_not_called()

    def test_cites_high_relevance_notes(self):
        self.mock_llm.generate.return_value = "Answer"
        scores = {"a": 0.9, "b": 0.4, "c": 0.55, "d": 0.1}
        result = self.service.generate_answer("q", self.notes, scores)

        self.assertEqual(result["answer"], "Answer")
        self.assertEqual(result["usedNoteIds"], ["a", "c"])
        prompt = self.mock_llm.generate.call_args[0][0]
        self.assertIn("Title a [Relevance: 90%]", prompt)
        self.assertNotIn("Title d", prompt)

    def test_falls_back_to_top_three(self):
        self.mock_llm.generate.return_value = "Answer"
        scores = {"a": 0.31, "b": 0.45, "c": 0.4, "d": 0.35}
        result = self.service.generate_answer("q", self.notes, scores)
        self.assertEqual(result["usedNoteIds"], ["b", "c", "d"])

    def test_provider_error(self):
        self.mock_llm.generate.side_effect = ProviderError("down")
        result = self.service.generate_answer("q", self.notes, {"a": 0.9})
        self.assertEqual(result, {"answer": "Error generating answer.", "usedNoteIds": []})

    def test_empty_reply(self):
        self.mock_llm.generate.return_value = ""
        result = self.service.generate_answer("q", self.notes, {"a": 0.9})
        self.assertEqual(result["answer"], "No answer generated.")


class TestClustersAndEdits(unittest.TestCase):
    def setUp(self):
        self.mock_llm = MagicMock()
        self.service = GenerationService(self.mock_llm)

    def test_generate_clusters(self):
        self.mock_llm.generate.return_value = '```json\n[{"name": "Food", "noteIds": ["a"]}]\n```'
        clusters = self.service.generate_clusters([make_note("a")])

        self.assertEqual(len(clusters), 1)
        self.assertEqual(clusters[0].name, "Food")
        self.assertEqual(clusters[0].note_ids, ["a"])
        self.assertTrue(clusters[0].id.startswith("cluster-0-"))
        self.assertTrue(self.mock_llm.generate.call_args[1]["json_mode"])

    def test_generate_clusters_object_wrapped_reply(self):
        self.mock_llm.generate.return_value = '{"clusters": [{"name": "Food", "noteIds": ["a"]}]}'
        clusters = self.service.generate_clusters([make_note("a")])
        self.assertEqual([(c.name, c.note_ids) for c in clusters], [("Food", ["a"])])
        schema = self.mock_llm.generate.call_args[1]["response_schema"]
        self.assertEqual(schema["type"], "ARRAY")

    def test_parse_single_cluster_object(self):
        self.assertEqual(
            parse_cluster_response('{"name": "Tech", "noteIds": ["b"]}'),
            [{"name": "Tech", "noteIds": ["b"]}],
        )

    def test_generate_clusters_bad_json(self):
        self.mock_llm.generate.return_value = "not json"
        self.assertEqual(self.service.generate_clusters([make_note("a")]), [])

    def test_generate_clusters_without_notes(self):
        self.assertEqual(self.service.generate_clusters([]), [])
        self.mock_llm.generate.assert_not_called()

    def test_edit_falls_back_to_original(self):
        self.mock_llm.generate.side_effect = ProviderError("down")
        self.assertEqual(self.service.edit_note_content("original", "shorter"), "original")

    def test_edit_prompt(self):
        self.mock_llm.generate.return_value = "new"
        self.assertEqual(self.service.edit_note_content("old", "fix grammar"), "new")
        self.assertIn('instruction: "fix grammar"', self.mock_llm.generate.call_args[0][0])

    def test_parse_cluster_response_rejects_objects(self):
        with self.assertRaises(ValueError):
            parse_cluster_response('{"name": "x"}')


if __name__ == '__main__':
    unittest.main()
