import base64
import os
import shutil
import tempfile
import unittest
import wave
from unittest.mock import MagicMock

from memograph.app import MemographApp, fallback_title, split_imported_text
from memograph.core.domain.note import ChatMessage, Cluster, Note
from memograph.core.errors import SpeechUnavailableError
from memograph.core.services.agent_service import AgentTurn
from memograph.core.services.voice_service import VoiceInput
from memograph.infrastructure.storage.memory_store import InMemoryKeyValueStore
from memograph.infrastructure.storage.note_repository import NoteRepository


class TestImportHelpers(unittest.TestCase):
    def test_short_first_line_becomes_title(self):
        self.assertEqual(split_imported_text("Shopping\nmilk\neggs", "list.txt"), ("Shopping", "milk\neggs"))

    def test_long_first_line_uses_file_name(self):
        text = "x" * 80 + "\nmore"
        self.assertEqual(split_imported_text(text, "/tmp/ideas.md"), ("ideas", text))

    def test_single_line_file_keeps_text(self):
        self.assertEqual(split_imported_text("Just a title", "a.txt"), ("Just a title", "Just a title"))

    def test_fallback_title(self):
        self.assertEqual(fallback_title("one two three four five six"), "one two three four five...")
        self.assertEqual(fallback_title("   "), "Untitled Note")


class TestMemographApp(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryKeyValueStore()
        self.repo = NoteRepository(self.store)
        self.mock_embedder = MagicMock()
        self.mock_embedder.embed.return_value = [1.0, 0.0]
        self.mock_agent = MagicMock()
        self.mock_synth = MagicMock()
        self.mock_synth.sample_rate = 24000

        self.app = MemographApp(
            repository=self.repo,
            embedder=self.mock_embedder,
            agent=self.mock_agent,
            synthesizer=self.mock_synth,
        )
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_starts_with_greeting(self):
        self.assertEqual(self.app.chat_history[0].id, "init-greeting")

    def test_add_note_persists(self):
        note = self.app.add_note(content="Buy milk and eggs on the way home")
        self.assertEqual(note.title, "Buy milk and eggs on...")
        self.assertEqual(note.embedding, [1.0, 0.0])
        self.assertEqual(self.repo.load_notes(), [note])

    def test_add_empty_note_is_ignored(self):
        self.assertIsNone(self.app.add_note(content="  ", title=""))
        self.assertEqual(self.app.notes, [])

    def test_save_note_updates_in_place(self):
        first = self.app.add_note(content="first", title="First")
        second = self.app.add_note(content="second", title="Second")
        self.mock_embedder.embed.return_value = [0.0, 1.0]

        saved = self.app.save_note(first.with_changes(content="edited"))

        self.assertEqual(saved.id, first.id)
        self.assertEqual([n.id for n in self.app.notes], [second.id, first.id])
        self.assertEqual(self.app.get_note(first.id).embedding, [0.0, 1.0])

    def test_save_unknown_note_is_added(self):
        saved = self.app.save_note(Note(id="ghost", title="New", content="c", created_at=1))
        self.assertNotEqual(saved.id, "ghost")
        self.assertEqual(self.app.notes[0].id, saved.id)

    def test_delete_note(self):
        note = self.app.add_note(content="bye", title="Bye")
        self.assertFalse(self.app.delete_note("missing"))
        self.assertTrue(self.app.delete_note(note.id))
        self.assertEqual(self.repo.load_notes(), [])

    def test_visible_notes_sort_and_cluster_filter(self):
        old = Note(id="old", title="Old", content="", created_at=1)
        new = Note(id="new", title="New", content="", created_at=2)
        self.app.notes = [old, new]
        self.app.clusters = [Cluster(id="c1", name="Only old", note_ids=["old", "deleted"])]

        self.assertEqual([n.id for n in self.app.visible_notes()], ["new", "old"])
        self.app.sort_order = "oldest"
        self.assertEqual([n.id for n in self.app.visible_notes()], ["old", "new"])
        self.app.active_cluster_id = "c1"
        self.assertEqual([n.id for n in self.app.visible_notes()], ["old"])

    def test_import_files(self):
        good = os.path.join(self.tmp_dir, "recipe.md")
        with open(good, 'w', encoding='utf-8') as f:
            f.write("Pancakes\nFlour, milk, eggs.")
        bad = os.path.join(self.tmp_dir, "image.png")
        missing = os.path.join(self.tmp_dir, "missing.txt")

        report = self.app.import_files([good, bad, missing])

        self.assertEqual([n.title for n in report.imported], ["Pancakes"])
        self.assertEqual(report.imported[0].content, "Flour, milk, eggs.")
        self.assertEqual([p for p, _ in report.failed], [bad, missing])
        self.assertEqual(len(self.repo.load_notes()), 1)

    def test_load_demo_replaces_notes(self):
        self.app.add_note(content="mine", title="Mine")
        notes = self.app.load_demo()
        self.assertEqual(len(notes), 30)
        self.assertNotIn("Mine", [n.title for n in self.app.notes])
        self.assertTrue(all(n.embedding == [1.0, 0.0] for n in notes))

    def test_search_uses_query_embedding(self):
        self.app.notes = [
            Note(id="a", title="A", content="", created_at=1, embedding=[1.0, 0.0]),
            Note(id="b", title="B", content="", created_at=1, embedding=[0.0, 1.0]),
        ]
        results = self.app.search("anything")
        self.assertEqual([r.note.id for r in results], ["a"])

    def test_agent_message_applies_turn(self):
        created = Note(id="gen", title="Plan", content="...", created_at=3, is_generated=True)
        reply = ChatMessage(id="r1", role="assistant", content="Created it.")
        self.mock_agent.run_turn.return_value = AgentTurn(
            messages=[reply], notes=[created], clusters=[], opened_note_id="gen", completed=True, iterations=2
        )

        turn = self.app.handle_agent_message("make a plan")

        history_arg = self.mock_agent.run_turn.call_args[0][1]
        self.assertEqual([m.id for m in history_arg], ["init-greeting"])
        self.assertEqual(self.app.chat_history[1].content, "make a plan")
        self.assertEqual(self.app.chat_history[-1], reply)
        self.assertEqual(self.repo.load_notes(), [created])
        self.assertEqual(self.app.selected_note, created)
        self.assertTrue(turn.completed)

    def test_opened_note_is_cleared_on_next_turn(self):
        note = self.app.add_note(content="keys", title="Keys")
        self.mock_agent.run_turn.return_value = AgentTurn(
            messages=[], notes=self.app.notes, clusters=[], opened_note_id=note.id, completed=True
        )
        self.app.handle_agent_message("open my keys note")
        self.assertEqual(self.app.selected_note, note)

        self.mock_agent.run_turn.return_value = AgentTurn(messages=[], notes=self.app.notes, clusters=[], completed=True)
        self.app.handle_agent_message("thanks")
        self.assertIsNone(self.app.selected_note)

    def test_agent_message_without_changes_does_not_write(self):
        self.mock_agent.run_turn.return_value = AgentTurn(messages=[], notes=[], clusters=[])
        self.app.handle_agent_message("hello")
        self.assertIsNone(self.store.get("memograph_notes"))

    def test_blank_agent_message_is_ignored(self):
        self.assertIsNone(self.app.handle_agent_message("   "))
        self.mock_agent.run_turn.assert_not_called()

    def test_speak_writes_wav(self):
        pcm = b"\x00\x01" * 100
        self.mock_synth.synthesize.return_value = base64.b64encode(pcm).decode()
        path = os.path.join(self.tmp_dir, "out.wav")

        self.assertEqual(self.app.speak("init-greeting", path), path)
        with wave.open(path, "rb") as wav:
            self.assertEqual(wav.getframerate(), 24000)
            self.assertEqual(wav.getnframes(), 100)
        self.assertFalse(self.app.chat_history[0].is_audio_playing)

    def test_speak_failure(self):
        self.mock_synth.synthesize.return_value = None
        self.assertIsNone(self.app.speak("init-greeting", os.path.join(self.tmp_dir, "x.wav")))
        self.assertIsNone(self.app.speak("unknown-id", os.path.join(self.tmp_dir, "x.wav")))

    def test_toggle_listening_without_speech(self):
        with self.assertRaises(SpeechUnavailableError):
            self.app.toggle_listening()

    def test_toggle_listening_fills_fields(self):
        source = MagicMock()
        self.app.voice = VoiceInput(source)
        self.app.toggle_listening("voice")
        source.start.call_args[0][0]([MagicMock(transcript="remember the keys", is_final=True)], 0)

        self.assertEqual(self.app.toggle_listening("voice"), "remember the keys")
        self.assertEqual(self.app.new_note_content, "remember the keys")
        self.assertEqual(self.app.input_mode, "voice")


if __name__ == '__main__':
    unittest.main()
