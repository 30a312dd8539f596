"""FitMatch application wiring and command-line entry point."""

import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from fitmatch.chat.fanout import NotificationHub
from fitmatch.chat.ledger import ChatLedger
from fitmatch.chat.models import ChatSummary, ChatView, Message
from fitmatch.clock import Clock, SystemClock, ensure_aware
from fitmatch.config import LOG_PATH, Settings, ensure_data_dir, load_settings
from fitmatch.errors import FitMatchError
from fitmatch.matching.models import LikeResult, MatchRecord, NearbyCandidate
from fitmatch.matching.scorer import CompatibilityScorer
from fitmatch.matching.service import MatchService
from fitmatch.seed import load_profiles
from fitmatch.storage.database import init_db
from fitmatch.storage.directory import SqlUserDirectory
from fitmatch.storage.locks import KeyedLock
from fitmatch.storage.store import SqlStore

logger = logging.getLogger(__name__)


def configure_logging(level: str = "WARNING", log_path: Path = LOG_PATH) -> None:
    """Configure application logging."""
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    resolved = str(log_path.resolve())
    has_file_handler = any(
        isinstance(handler, logging.FileHandler)
        and handler.baseFilename == resolved
        for handler in root_logger.handlers
    )
    if not has_file_handler:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level.upper())
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


class FitMatchApp:
    """Caller-facing operations over one database.

    Every operation performed on behalf of a user refreshes that user's
    last-active timestamp, which drives the online flag others see.
    """

    def __init__(self, settings: Optional[Settings] = None, clock: Optional[Clock] = None):
        self.settings = settings or Settings()
        self.clock = clock or SystemClock()

        self.database = init_db(self.settings.database_url)

        self.directory = SqlUserDirectory(self.database)
        self.store = SqlStore(self.database)
        self.hub = NotificationHub(queue_size=self.settings.fanout_queue_size)
        self.matches = MatchService(
            directory=self.directory,
            store=self.store,
            scorer=CompatibilityScorer(self.settings.location_threshold_km),
            clock=self.clock,
            pair_locks=KeyedLock(),
            search_radius_m=self.settings.search_radius_m,
        )
        self.chats = ChatLedger(
            store=self.store,
            directory=self.directory,
            channel=self.hub,
            clock=self.clock,
            chat_locks=KeyedLock(),
            online_window=timedelta(minutes=self.settings.online_window_minutes),
        )

    def like(self, user_id: str, target_id: str) -> LikeResult:
        self._touch(user_id)
        return self.matches.like(user_id, target_id)

    def reject(self, user_id: str, target_id: str) -> MatchRecord:
        self._touch(user_id)
        return self.matches.reject(user_id, target_id)

    def list_mutual(self, user_id: str) -> List[MatchRecord]:
        self._touch(user_id)
        return self.matches.list_mutual(user_id)

    def nearby(self, user_id: str, radius_m: Optional[float] = None) -> List[NearbyCandidate]:
        self._touch(user_id)
        return self.matches.find_nearby(user_id, radius_m)

    def list_chats(self, user_id: str) -> List[ChatSummary]:
        self._touch(user_id)
        return self.chats.list_for_user(user_id)

    def open_chat(self, chat_id: str, user_id: str) -> ChatView:
        self._touch(user_id)
        return self.chats.open_chat(chat_id, user_id)

    def send_message(self, chat_id: str, user_id: str, content: str) -> Message:
        self._touch(user_id)
        return self.chats.append_message(chat_id, user_id, content)

    def mark_read(self, chat_id: str, user_id: str) -> int:
        self._touch(user_id)
        return self.chats.mark_read(chat_id, user_id)

    def close(self) -> None:
        self.database.dispose()

    def _touch(self, user_id: str) -> None:
        self.directory.touch(user_id, ensure_aware(self.clock.now()))


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="fitmatch",
        description="FitMatch - find training partners and chat with your matches",
    )
    parser.add_argument("--settings", type=Path, help="Path to settings YAML")
    parser.add_argument("--db", help="Database URL (overrides settings)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables")

    seed_parser = subparsers.add_parser("seed", help="Load user profiles from a YAML file")
    seed_parser.add_argument("path", type=Path, help="Seed file path")

    nearby_parser = subparsers.add_parser("nearby", help="List scored candidates near a user")
    nearby_parser.add_argument("user_id")
    nearby_parser.add_argument("--radius", type=float, help="Search radius in meters")

    for name, help_text in (("like", "Like another user"), ("reject", "Decline a like")):
        action_parser = subparsers.add_parser(name, help=help_text)
        action_parser.add_argument("user_id")
        action_parser.add_argument("target_id")

    mutual_parser = subparsers.add_parser("mutual", help="List mutual matches")
    mutual_parser.add_argument("user_id")

    chats_parser = subparsers.add_parser("chats", help="List a user's chats")
    chats_parser.add_argument("user_id")

    open_parser = subparsers.add_parser("open", help="Show a chat and mark it read")
    open_parser.add_argument("chat_id")
    open_parser.add_argument("user_id")

    send_parser = subparsers.add_parser("send", help="Send a message")
    send_parser.add_argument("chat_id")
    send_parser.add_argument("user_id")
    send_parser.add_argument("text", nargs="+")

    read_parser = subparsers.add_parser("read", help="Mark a chat read")
    read_parser.add_argument("chat_id")
    read_parser.add_argument("user_id")

    return parser


def run_command(args: argparse.Namespace, app: FitMatchApp, console: Console) -> None:
    """Dispatch one parsed command."""
    if args.command == "init-db":
        console.print("Database ready.")

    elif args.command == "seed":
        profiles = load_profiles(args.path)
        for profile in profiles:
            app.directory.add_user(profile)
        console.print(f"Loaded {len(profiles)} users.")

    elif args.command == "nearby":
        table = Table(title=f"Nearby partners for {args.user_id}")
        table.add_column("User")
        table.add_column("Name")
        table.add_column("Score", justify="right")
        table.add_column("Distance (km)", justify="right")
        for candidate in app.nearby(args.user_id, args.radius):
            table.add_row(
                candidate.profile.id,
                candidate.profile.name,
                str(candidate.score),
                f"{candidate.distance_km:.1f}",
            )
        console.print(table)

    elif args.command == "like":
        result = app.like(args.user_id, args.target_id)
        if result.is_mutual:
            console.print(f"[green]It's a match![/green] Chat {result.chat.id} created.")
        else:
            console.print(f"Like sent (score {result.match.match_score}).")

    elif args.command == "reject":
        app.reject(args.user_id, args.target_id)
        console.print("Like declined.")

    elif args.command == "mutual":
        table = Table(title=f"Mutual matches of {args.user_id}")
        table.add_column("Match")
        table.add_column("Partner")
        table.add_column("Score", justify="right")
        for record in app.list_mutual(args.user_id):
            table.add_row(record.id, record.pair.other(args.user_id), str(record.match_score))
        console.print(table)

    elif args.command == "chats":
        table = Table(title=f"Chats of {args.user_id}")
        table.add_column("Chat")
        table.add_column("With")
        table.add_column("Last message")
        table.add_column("When")
        table.add_column("Unread", justify="right")
        for summary in app.list_chats(args.user_id):
            name = summary.user.name + (" [green]●[/green]" if summary.online else "")
            table.add_row(
                summary.chat_id,
                name,
                summary.last_message,
                summary.time,
                str(summary.unread_count),
            )
        console.print(table)

    elif args.command == "open":
        view = app.open_chat(args.chat_id, args.user_id)
        status = "online" if view.online else "offline"
        console.print(f"[bold]{view.user.name}[/bold] ({status})")
        for message in view.messages:
            style = "cyan" if message.sender == "me" else "magenta"
            console.print(f"[{style}]{message.sender}[/{style}] {message.time}: {message.text}")

    elif args.command == "send":
        message = app.send_message(args.chat_id, args.user_id, " ".join(args.text))
        console.print(f"Sent message #{message.seq}.")

    elif args.command == "read":
        count = app.mark_read(args.chat_id, args.user_id)
        console.print(f"Marked {count} messages read.")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the fitmatch command."""
    load_dotenv()
    args = create_parser().parse_args(argv)

    settings = load_settings(args.settings)
    if args.db:
        settings = settings.model_copy(update={"database_url": args.db})

    ensure_data_dir()
    configure_logging(settings.log_level, LOG_PATH)
    console = Console()

    try:
        app = FitMatchApp(settings)
        try:
            run_command(args, app, console)
        finally:
            app.close()
    except (FitMatchError, FileNotFoundError) as e:
        logger.warning(f"Command {args.command} failed: {e}")
        console.print(f"[red]Error:[/red] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
