"""Terminal rendering of orchestrator state."""

import logging
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.conversation import ConversationKind
from ..models.transcript import TranscriptRole
from ..services.orchestrator import OrchestratorSnapshot

logger = logging.getLogger(__name__)

ROLE_LABELS = {
    TranscriptRole.TRANSCRIPTION: "🎙 Transcription",
    TranscriptRole.USER: "👤 You",
    TranscriptRole.ASSISTANT: "⚡ AI",
}

KIND_STYLES = {
    ConversationKind.USER: ("You", "bold cyan"),
    ConversationKind.ASSISTANT: ("AI", "green"),
    ConversationKind.ERROR: ("Error", "bold red"),
}


def status_line(snapshot: OrchestratorSnapshot) -> str:
    session = snapshot.session
    parts = ["Session active" if session is not None and session.is_active else "Ready"]
    if snapshot.is_recording:
        parts.append("🎙 Recording")
    if snapshot.is_capturing:
        parts.append("📷 Capturing")
    if snapshot.is_streaming:
        parts.append("🤖 Generating...")
    if snapshot.is_transcribing:
        parts.append("📝 Transcribing...")
    return " • ".join(parts)


class ConsoleView:
    """Renders a snapshot of the session, transcript and conversation."""

    def __init__(self, console: Console = None):
        self.console = console or Console()

    def render(self, snapshot: OrchestratorSnapshot) -> None:
        session = snapshot.session
        if session is not None:
            header = Text(f"{session.title} [{session.status.value}] ({session.purpose.value}) - {session.id}")
        else:
            header = Text("No active session")
        self.console.print(Panel(header, title="⚡ VenkyAI", subtitle=snapshot.phase.value))

        transcript = Table(title="Transcript", show_lines=False)
        transcript.add_column("Time", style="dim")
        transcript.add_column("Role")
        transcript.add_column("Content")
        for entry in snapshot.transcript:
            transcript.add_row(entry.timestamp, ROLE_LABELS[entry.role], Text(entry.content))
        self.console.print(transcript)

        self.console.print("💬 Conversation", style="bold")
        for item in snapshot.conversation:
            label, style = KIND_STYLES[item.kind]
            line = Text(f"{label}: ", style=style)
            line.append(item.text)
            self.console.print(line)
        if snapshot.is_streaming:
            self.console.print(Text(f"AI (streaming): {snapshot.streaming_text}", style="italic green"))

        self.console.print(status_line(snapshot), style="dim")
