"""Main application entry point for audiocatalog."""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .config import CatalogConfig
from .errors import CatalogError
from .services import LibraryService, RemoteRecordingsService
from .ui import LibraryScreen
from .upload import HttpTransport, UploadPipeline, UploadPublisher
from .models.upload import Success

logger = logging.getLogger(__name__)


class Application:
    """Wires configuration, services and the console screen together."""

    def __init__(self, config_path: Optional[str] = None, log_level: Optional[str] = None):
        # Load configuration
        self.config = CatalogConfig(config_path)
        # Set up logging (override config with command line if specified)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)

        self.screen = LibraryScreen(Console())
        self.library = LibraryService(self.config)
        self._transport: Optional[HttpTransport] = None

    @property
    def transport(self) -> HttpTransport:
        if self._transport is None:
            self._transport = HttpTransport(
                self.config.get_server_url(),
                auth_token=self.config.get('server.auth_token'),
                timeout_seconds=float(self.config.get('server.timeout_seconds', 300)),
            )
        return self._transport

    def cmd_list(self, args: argparse.Namespace) -> int:
        self.screen.show_recordings(self.library.load_recordings())
        return 0

    def cmd_show(self, args: argparse.Namespace) -> int:
        self.screen.show_recording(self.library.get_recording(args.path))
        return 0

    def cmd_rename(self, args: argparse.Namespace) -> int:
        record = self.library.update_title(args.path, args.title)
        self.screen.console.print(f"✅ Renamed to {record.title!r}", style="green")
        return 0

    def cmd_import(self, args: argparse.Namespace) -> int:
        record = self.library.import_recording(args.source, args.title)
        self.screen.console.print(f"✅ Imported as {record.file_name}", style="green")
        return 0

    def cmd_delete(self, args: argparse.Namespace) -> int:
        if self.library.delete_paths(args.paths):
            self.screen.console.print(f"🗑️  Deleted {len(args.paths)} recording(s)", style="green")
            return 0
        self.screen.console.print("❌ Some recordings could not be fully deleted, see the log", style="red")
        return 1

    def cmd_upload(self, args: argparse.Namespace) -> int:
        pipeline = UploadPipeline(
            self.transport,
            chunk_size=int(self.config.get('upload.chunk_size', 64 * 1024)),
            progress_buffer=int(self.config.get('upload.progress_buffer', 128)),
            publisher=UploadPublisher(),
        )
        path = Path(args.path)
        with pipeline.upload(path, companion_file=args.companion,
                             title=args.title, description=args.description) as session:
            terminal = self.screen.follow_upload(session, path.name)
        return 0 if isinstance(terminal, Success) else 1

    def cmd_stats(self, args: argparse.Namespace) -> int:
        self.screen.show_storage_stats(self.library.get_storage_stats())
        return 0

    def cmd_remote_list(self, args: argparse.Namespace) -> int:
        remote = RemoteRecordingsService(self.transport)
        self.screen.show_remote_recordings(remote.list_recordings())
        return 0

    def cleanup(self) -> None:
        self.library.shutdown()


def setup_logging(config, level: str = "INFO") -> None:

    """Set up logging configuration from YAML config."""
    # Get log file path from config
    log_file_path = config.get('logging.file_path', 'data/logs/audiocatalog.log')
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    # Set up handlers
    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    # Log startup
    logger = logging.getLogger(__name__)
    logger.info("="*50)
    logger.info("audiocatalog starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("="*50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="audiocatalog - Manage and upload local audio recordings",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: looks for audiocatalog.yaml)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="audiocatalog v0.1.0"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List local recordings, newest first")

    show = commands.add_parser("show", help="Show one recording")
    show.add_argument("path", help="Audio file path")

    rename = commands.add_parser("rename", help="Change the title of a recording")
    rename.add_argument("path", help="Audio file path")
    rename.add_argument("title", help="New title")

    import_cmd = commands.add_parser("import", help="Copy an audio file into the library")
    import_cmd.add_argument("source", help="Audio file to import")
    import_cmd.add_argument("--title", help="Title for the imported recording")

    delete = commands.add_parser("delete", help="Delete recordings and their metadata")
    delete.add_argument("paths", nargs="+", help="Audio file paths")

    upload = commands.add_parser("upload", help="Upload a recording to the server")
    upload.add_argument("path", help="Audio file path")
    upload.add_argument("--title", help="Title sent with the upload")
    upload.add_argument("--description", help="Description sent with the upload")
    upload.add_argument("--companion", help="Companion document (e.g. slides) sent with the upload")

    commands.add_parser("stats", help="Show storage usage")
    commands.add_parser("remote-list", help="List recordings uploaded to the server")

    return parser


COMMANDS = {
    "list": Application.cmd_list,
    "show": Application.cmd_show,
    "rename": Application.cmd_rename,
    "import": Application.cmd_import,
    "delete": Application.cmd_delete,
    "upload": Application.cmd_upload,
    "stats": Application.cmd_stats,
    "remote-list": Application.cmd_remote_list,
}


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for audiocatalog."""
    args = build_parser().parse_args(argv)

    app = None
    try:
        app = Application(args.config, args.log_level)
        exit_code = COMMANDS[args.command](app, args)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        exit_code = 130
    except (CatalogError, OSError, ValueError) as e:
        print(f"❌ Error: {e}")
        logging.error(f"Command {args.command} failed: {e}")
        exit_code = 1
    finally:
        if app is not None:
            app.cleanup()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
