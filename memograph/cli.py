"""
Memograph CLI - semantic personal notes with an LLM agent.

Usage:
    # Notes
    python main.py add "Buy milk and eggs" --title "Groceries"
    python main.py list --sort oldest
    python main.py show <note-id>
    python main.py search "breakfast ideas"
    python main.py import notes/*.md
    python main.py demo

    # Graph and clusters
    python main.py organize
    python main.py graph --output graph.json

    # Agent
    python main.py chat
    python main.py dictate --audio memo.wav
"""

import argparse
import json
import os
import sys
from datetime import datetime
from typing import List

from memograph.app import MemographApp, create_app
from memograph.config import Settings
from memograph.core.domain.note import ChatMessage, Note
from memograph.core.errors import MemographError, SpeechUnavailableError
from memograph.core.services.voice_service import VoiceInput
from memograph.logging_config import setup_logging


def _format_time(millis: int) -> str:
    return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M")


def print_note_card(note: Note):
    marker = "🤖" if note.is_generated else "📄"
    snippet = note.content.replace("\n", " ")
    if len(snippet) > 100:
        snippet = snippet[:100] + "..."
    print(f"{marker} {note.title}  [{note.id}]  {_format_time(note.created_at)}")
    if snippet:
        print(f"   {snippet}")


def print_message(message: ChatMessage):
    """Prints one transcript entry as it appears or gets updated."""
    if message.tool_calls:
        if message.tool_results is None:
            print("⚙️  Action Log")
            for call in message.tool_calls:
                print(f"  • {call.name} {json.dumps(call.args, ensure_ascii=False)}")
        else:
            for result in message.tool_results:
                text = json.dumps(result.result, ensure_ascii=False, default=str)
                print(f"  ✓ {result.name}: {text[:200]}")
        return

    prefix = "🧑" if message.role == "user" else "🤖"
    print(f"\n{prefix} {message.content or ''}")


def print_sources(app: MemographApp, message: ChatMessage):
    if not message.source_note_ids:
        return
    titles = [n.title for n in (app.get_note(i) for i in message.source_note_ids) if n]
    if titles:
        print(f"📚 Sources: {', '.join(titles)}")


def cmd_add(app: MemographApp, args):
    note = app.add_note(content=args.content or "", title=args.title or "")
    if note is None:
        print("Nothing to save.")
        return
    print("✅ Saved")
    print_note_card(note)


def cmd_list(app: MemographApp, args):
    app.sort_order = args.sort
    if args.cluster:
        match = [c for c in app.clusters if c.id == args.cluster or c.name.lower() == args.cluster.lower()]
        if not match:
            print(f"No cluster named '{args.cluster}'.")
            return
        app.active_cluster_id = match[0].id

    notes = app.visible_notes()
    if not notes:
        print("No notes yet. Add one with 'add' or load the demo with 'demo'.")
        return
    for note in notes:
        print_note_card(note)

    if app.clusters and not args.cluster:
        print("\n🗂️  Clusters:")
        for cluster in app.clusters:
            print(f"  - {cluster.name} ({len(cluster.note_ids)} notes)")


def cmd_show(app: MemographApp, args):
    note = app.get_note(args.note_id)
    if note is None:
        print("Note not found.")
        return
    print(f"# {note.title}\n")
    print(note.content)
    related = app.related(note.id)
    if related:
        print("\n🔗 Related Notes:")
        for r in related:
            print(f"  - {r.note.title} ({r.score:.2f})")


def cmd_edit(app: MemographApp, args):
    note = app.get_note(args.note_id)
    if note is None:
        print("Note not found.")
        return
    if args.ai:
        updated = app.ai_edit(note.id, args.ai)
    else:
        updated = app.save_note(note.with_changes(
            title=args.title if args.title is not None else note.title,
            content=args.content if args.content is not None else note.content,
        ))
    print("✅ Updated")
    print_note_card(updated)


def cmd_delete(app: MemographApp, args):
    if app.delete_note(args.note_id):
        print("🗑️  Deleted")
    else:
        print("Note not found.")


def cmd_search(app: MemographApp, args):
    results = app.search(args.query)
    if not results:
        print("No matching notes.")
        return
    for r in results:
        print(f"({r.score:.2f}) ", end="")
        print_note_card(r.note)


def cmd_import(app: MemographApp, args):
    report = app.import_files(args.files)
    for note in report.imported:
        print_note_card(note)
    for path, reason in report.failed:
        print(f"❌ Failed to read file: {os.path.basename(path)} ({reason})")
    print(f"\nImported {len(report.imported)} notes")


def cmd_demo(app: MemographApp, args):
    notes = app.load_demo()
    print(f"✅ Loaded {len(notes)} demo notes")


def cmd_graph(app: MemographApp, args):
    graph = app.graph()
    data = graph.to_node_link()
    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        print(f"🕸️  Wrote {len(data['nodes'])} nodes and {len(data['links'])} links to {args.output}")
        return

    titles = {n.id: n.title for n in app.notes}
    for link in graph.semantic_links():
        print(f"  {titles[link.source]} ↔ {titles[link.target]} ({link.value:.2f})")
    print(f"\n{len(data['nodes'])} nodes, {len(data['links'])} links")


def cmd_organize(app: MemographApp, args):
    run_agent(app, None, organize=True)
    for cluster in app.clusters:
        print(f"🗂️  {cluster.name}: {len(cluster.note_ids)} notes")


def run_agent(app: MemographApp, text: str, organize: bool = False):
    turn = app.organize(on_message=print_message) if organize else app.handle_agent_message(text, on_message=print_message)
    if turn is None:
        return
    if turn.messages and turn.messages[-1].content:
        print_sources(app, turn.messages[-1])
    if not turn.completed and not (turn.messages and turn.messages[-1].content):
        print("\n⚠️  The agent stopped before giving a final answer.")
    if app.selected_note:
        print()
        cmd_show(app, argparse.Namespace(note_id=app.selected_note.id))


def cmd_chat(app: MemographApp, args):
    print(f"🤖 {app.chat_history[0].content}")
    print("Commands: /speak (read last answer aloud), /quit\n")
    while True:
        try:
            text = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if text in ("/quit", "/exit"):
            break
        if text == "/speak":
            speak_last(app, args.audio_out)
            continue
        run_agent(app, text)


def speak_last(app: MemographApp, output_path: str):
    answers = [m for m in app.chat_history if m.role == "assistant" and m.content]
    if not answers:
        print("Nothing to read.")
        return
    path = app.speak(answers[-1].id, output_path)
    print(f"🔊 Audio written to {path}" if path else "Could not generate speech.")


def cmd_speak(app: MemographApp, args):
    message = ChatMessage(id="cli-speak", role="assistant", content=args.text)
    app.chat_history.append(message)
    path = app.speak(message.id, args.output)
    print(f"🔊 Audio written to {path}" if path else "Could not generate speech.")


def cmd_dictate(app: MemographApp, args):
    if args.audio:
        from memograph.infrastructure.speech.transcript_sources import GeminiAudioTranscriptSource
        source = GeminiAudioTranscriptSource(args.audio)
    else:
        from memograph.infrastructure.speech.transcript_sources import LineTranscriptSource
        print("🎤 Listening... (type, end with Ctrl-D)")
        source = LineTranscriptSource()
    app.voice = VoiceInput(source)

    mode = "voice" if args.target == "note" else "search"
    app.toggle_listening(mode)
    transcript = app.toggle_listening(mode)
    if not transcript:
        print("Heard nothing.")
        return

    if args.target == "note":
        cmd_add(app, argparse.Namespace(content=transcript, title=args.title))
    else:
        run_agent(app, transcript)


def cmd_calendar_login(app: MemographApp, args):
    calendar = app.agent.executor.calendar
    if calendar is None:
        print("Calendar is not configured. Set GOOGLE_CLIENT_ID and GOOGLE_REFRESH_TOKEN in .env")
        return
    calendar.sign_in()
    print(f"✅ Calendar connected{' as ' + calendar.user_email if calendar.user_email else ''}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Semantic personal notes with an LLM agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add", help="Add a note")
    p.add_argument("content", nargs="?", default="")
    p.add_argument("--title", "-t", default="")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("list", help="List notes")
    p.add_argument("--sort", choices=["newest", "oldest"], default="newest")
    p.add_argument("--cluster", "-c", help="Only show notes of this cluster (id or name)")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("show", help="Show a note and its related notes")
    p.add_argument("note_id")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("edit", help="Edit a note")
    p.add_argument("note_id")
    p.add_argument("--title")
    p.add_argument("--content")
    p.add_argument("--ai", help='Let the model rewrite the content (e.g. "fix grammar")')
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("delete", help="Delete a note")
    p.add_argument("note_id")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("search", help="Semantic search")
    p.add_argument("query")
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("import", help="Import .txt/.md files as notes")
    p.add_argument("files", nargs="+")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("demo", help="Replace all notes with the demo notes")
    p.set_defaults(func=cmd_demo)

    p = sub.add_parser("graph", help="Semantic graph of the notes")
    p.add_argument("--output", "-o", help="Write node-link JSON to this file")
    p.set_defaults(func=cmd_graph)

    p = sub.add_parser("organize", help="Cluster notes with the agent")
    p.set_defaults(func=cmd_organize)

    p = sub.add_parser("chat", help="Talk to the note agent")
    p.add_argument("--audio-out", default="answer.wav", help="Where /speak writes audio")
    p.set_defaults(func=cmd_chat)

    p = sub.add_parser("speak", help="Read text aloud into a WAV file")
    p.add_argument("text")
    p.add_argument("--output", "-o", default="speech.wav")
    p.set_defaults(func=cmd_speak)

    p = sub.add_parser("dictate", help="Dictate a note or an agent message")
    p.add_argument("--audio", help="Transcribe this audio file instead of reading stdin")
    p.add_argument("--target", choices=["note", "agent"], default="note")
    p.add_argument("--title", default="")
    p.set_defaults(func=cmd_dictate)

    p = sub.add_parser("calendar-login", help="Connect Google Calendar")
    p.set_defaults(func=cmd_calendar_login)

    return parser


def main(argv: List[str] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    setup_logging(settings.log_level)

    try:
        app = create_app(settings)
        args.func(app, args)
    except SpeechUnavailableError as e:
        print(f"❌ {e}")
        return 1
    except (MemographError, OSError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
