"""Tests for application wiring and the command line."""

from pathlib import Path

import pytest

from fitmatch import app as app_module
from fitmatch.app import FitMatchApp, main
from fitmatch.clock import FixedClock
from fitmatch.config import ENV_OVERRIDES, Settings
from fitmatch.errors import NotFoundError

from tests.conftest import NOW, make_profile

SEED_FILE = Path(__file__).parent.parent / "data" / "seed.yaml"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(app_module, "LOG_PATH", tmp_path / "fitmatch.log")


@pytest.fixture
def app():
    clock = FixedClock(NOW)
    instance = FitMatchApp(Settings(database_url="sqlite://"), clock=clock)
    instance.directory.add_user(make_profile("ana"))
    instance.directory.add_user(make_profile("bruno"))
    yield instance
    instance.close()


class TestFitMatchApp:
    """Operations refresh presence for the acting user."""

    def test_like_touches_liker(self, app):
        app.like("ana", "bruno")

        assert app.directory.get_public("ana").last_active == NOW
        assert app.directory.get_public("bruno").last_active is None

    def test_chat_round_trip_with_presence(self, app):
        app.like("ana", "bruno")
        chat = app.like("bruno", "ana").chat

        app.send_message(chat.id, "bruno", "Run at 6?")
        (summary,) = app.list_chats("ana")
        assert summary.online is True
        assert summary.unread_count == 1

        app.clock.advance(minutes=30)
        view = app.open_chat(chat.id, "ana")
        assert view.online is False
        assert [m.sender for m in view.messages] == ["them"]
        assert app.mark_read(chat.id, "ana") == 0

    def test_unknown_user_is_not_touched(self, app):
        with pytest.raises(NotFoundError):
            app.like("ghost", "ana")

    def test_online_window_comes_from_settings(self):
        settings = Settings(database_url="sqlite://", online_window_minutes=60)
        instance = FitMatchApp(settings, clock=FixedClock(NOW))
        try:
            instance.directory.add_user(make_profile("ana"))
            instance.directory.add_user(make_profile("bruno"))
            instance.like("ana", "bruno")
            chat = instance.like("bruno", "ana").chat

            instance.clock.advance(minutes=30)
            assert instance.open_chat(chat.id, "ana").online is True
            instance.clock.advance(minutes=31)
            assert instance.open_chat(chat.id, "ana").online is False
        finally:
            instance.close()


class TestCommandLine:
    """main() against a throwaway SQLite file."""

    def test_full_flow(self, tmp_path, capsys):
        db = ["--db", f"sqlite:///{tmp_path / 'cli.db'}"]

        assert main(db + ["init-db"]) == 0
        assert main(db + ["seed", str(SEED_FILE)]) == 0
        assert "Loaded 3 users." in capsys.readouterr().out

        assert main(db + ["nearby", "ana"]) == 0
        assert "bruno" in capsys.readouterr().out

        assert main(db + ["like", "ana", "bruno"]) == 0
        assert "Like sent (score 85)." in capsys.readouterr().out
        assert main(db + ["like", "bruno", "ana"]) == 0
        assert "It's a match!" in capsys.readouterr().out

        reader = FitMatchApp(Settings(database_url=f"sqlite:///{tmp_path / 'cli.db'}"))
        try:
            (summary,) = reader.chats.list_for_user("ana")
        finally:
            reader.close()

        assert main(db + ["send", summary.chat_id, "ana", "see", "you", "there"]) == 0
        assert "Sent message #1." in capsys.readouterr().out
        assert main(db + ["read", summary.chat_id, "bruno"]) == 0
        assert "Marked 1 messages read." in capsys.readouterr().out
        assert main(db + ["open", summary.chat_id, "bruno"]) == 0
        assert "see you there" in capsys.readouterr().out
        assert main(db + ["mutual", "ana"]) == 0
        assert main(db + ["chats", "bruno"]) == 0

    def test_errors_return_nonzero(self, tmp_path, capsys):
        db = ["--db", f"sqlite:///{tmp_path / 'cli.db'}"]
        main(db + ["seed", str(SEED_FILE)])
        capsys.readouterr()

        assert main(db + ["like", "ana", "ghost"]) == 1
        assert "Error" in capsys.readouterr().out
        assert main(db + ["seed", str(tmp_path / "missing.yaml")]) == 1
