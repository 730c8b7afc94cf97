"""Console rendering of the recordings library and of upload progress."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ..models.recording import RecordingRecord
from ..models.remote import ServerRecord
from ..models.upload import Error, Loading, Success, UploadEvent
from ..models.upload import Progress as ProgressEvent
from ..upload.session import UploadSession

logger = logging.getLogger(__name__)


def format_duration(duration_millis: int) -> str:
    """Format milliseconds as ``M:SS`` (or ``H:MM:SS`` past an hour)."""
    total_seconds = max(0, duration_millis) // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def format_timestamp(timestamp_millis: int) -> str:
    return datetime.fromtimestamp(timestamp_millis / 1000).strftime("%Y-%m-%d %H:%M:%S")


class LibraryScreen:
    """Prints catalog tables and drives an upload progress bar."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def recordings_table(self, records: Iterable[RecordingRecord]) -> Table:
        table = Table(title="🎙️  Local recordings")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Title", style="bold")
        table.add_column("Recorded", style="cyan")
        table.add_column("Duration", justify="right")
        table.add_column("File", style="dim")

        for index, record in enumerate(records, start=1):
            table.add_row(
                str(index),
                record.title,
                format_timestamp(record.timestamp_millis),
                format_duration(record.duration_millis),
                record.file_name,
            )
        return table

    def show_recordings(self, records: Iterable[RecordingRecord]) -> None:
        records = list(records)
        if not records:
            self.console.print("No recordings found.", style="yellow")
            return
        self.console.print(self.recordings_table(records))

    def show_recording(self, record: RecordingRecord) -> None:
        body = (
            f"[bold]{record.title}[/bold]\n"
            f"Recorded: {format_timestamp(record.timestamp_millis)}\n"
            f"Duration: {format_duration(record.duration_millis)}\n"
            f"File: {record.file_path}\n"
            f"Id: {record.id}"
        )
        self.console.print(Panel(body, title=record.file_name))

    def show_remote_recordings(self, records: Iterable[ServerRecord]) -> None:
        table = Table(title="☁️  Uploaded recordings")
        table.add_column("Id", style="dim")
        table.add_column("Title", style="bold")
        table.add_column("File")
        table.add_column("Size", justify="right")

        for record in records:
            table.add_row(
                record.id or "",
                record.title or "",
                record.file_name or "",
                str(record.file_size) if record.file_size is not None else "",
            )
        self.console.print(table)

    def show_storage_stats(self, stats: Dict[str, Any]) -> None:
        if not stats:
            self.console.print("❌ Could not read storage statistics", style="red")
            return
        table = Table(title="📁 Storage")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("Directory", str(stats.get("recordings_directory", "")))
        table.add_row("Audio files", str(stats.get("audio_files", 0)))
        table.add_row("Metadata files", str(stats.get("sidecar_files", 0)))
        table.add_row("Total size (MB)", str(stats.get("total_size_mb", 0)))
        self.console.print(table)

    def follow_upload(self, session: UploadSession, label: str) -> Optional[UploadEvent]:
        """Render a session's events as a progress bar until it finishes.

        Returns:
            The terminal event, or None if the session was cancelled
        """
        terminal = None
        with Progress(SpinnerColumn(), TextColumn("{task.description}"), BarColumn(),
                      TextColumn("{task.percentage:>3.0f}%"), console=self.console) as progress:
            task_id = progress.add_task(f"Uploading {label}", total=100)
            for event in session:
                if isinstance(event, Loading):
                    progress.update(task_id, description=f"Preparing {label}")
                elif isinstance(event, ProgressEvent):
                    progress.update(task_id, description=f"Uploading {label}", completed=event.percent)
                else:
                    terminal = event

        if isinstance(terminal, Success):
            server_id = terminal.record.id if terminal.record else None
            suffix = f" (id {server_id})" if server_id else ""
            self.console.print(f"✅ Uploaded {label}{suffix}", style="green")
        elif isinstance(terminal, Error):
            self.console.print(f"❌ Upload failed: {terminal.message}", style="red")
        else:
            self.console.print("⏹️  Upload cancelled", style="yellow")
        return terminal
