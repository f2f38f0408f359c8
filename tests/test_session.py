"""Tests for interactive session state."""

from unittest.mock import Mock

import pytest

from card_mailer.errors import ExtractionError
from card_mailer.models.email import CardInput, GeneratedEmail, InputMode
from card_mailer.session import Session

RESULT = GeneratedEmail(subject="【御礼】異業種交流会（Irwin&Co 生成AI）", body="本文")


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def composer():
    mock = Mock()
    mock.compose.return_value = RESULT
    return mock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def copier():
    return Mock()


@pytest.fixture
def session(composer, settings, copier, clock):
    return Session(composer, settings, copier=copier, clock=clock)


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "card.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")
    return path


class TestSenderRoster:
    """Test the sender roster."""

    def test_initial_state(self, session):
        assert session.senders == ["田中康太郎", "アーウィン海"]
        assert session.sender_name == "田中康太郎"
        assert session.event_name == "異業種交流会"
        assert session.mode is InputMode.IMAGE

    def test_add_sender_selects_it(self, session):
        """Test adding a name also makes it the current sender."""
        assert session.add_sender("  佐藤花子 ") is True
        assert session.senders[-1] == "佐藤花子"
        assert session.sender_name == "佐藤花子"

    def test_blank_sender_ignored(self, session):
        assert session.add_sender("   ") is False
        assert len(session.senders) == 2
        assert session.sender_name == "田中康太郎"

    def test_select_sender(self, session):
        session.select_sender("アーウィン海")
        assert session.sender_name == "アーウィン海"

    def test_select_unknown_sender(self, session):
        with pytest.raises(ValueError, match="Unknown sender"):
            session.select_sender("誰か")


class TestImageSelection:
    """Test image loading and size rejection."""

    def test_select_image_clears_result(self, session, image_path):
        session.result = RESULT
        session.error = "old error"

        assert session.select_image(image_path) is True
        assert session.image_data_uri.startswith("data:image/png;base64,")
        assert session.result is None
        assert session.error is None

    def test_oversized_image_keeps_result(self, session, tmp_path, composer):
        """Test rejection happens before state reset and before any network call."""
        big = tmp_path / "big.png"
        with open(big, "wb") as f:
            f.truncate(6 * 1024 * 1024)
        session.result = RESULT

        assert session.select_image(big) is False
        assert session.error == "画像サイズは5MB以下にしてください。"
        assert session.result is RESULT
        assert session.image_data_uri is None
        composer.compose.assert_not_called()

    def test_missing_image(self, session, tmp_path):
        assert session.select_image(tmp_path / "nope.png") is False
        assert "Image not found" in session.error


class TestGenerate:
    """Test Session.generate."""

    def test_generate_from_image(self, session, composer, image_path):
        session.select_image(image_path)

        result = session.generate()

        assert result is RESULT
        assert session.result is RESULT
        assert session.busy is False
        card, sender, event = composer.compose.call_args.args
        assert card.mode is InputMode.IMAGE
        assert sender == "田中康太郎"
        assert event == "異業種交流会"

    def test_generate_from_text(self, session, composer):
        session.set_mode(InputMode.TEXT)
        session.set_text("株式会社サンプル\n鈴木一郎")
        session.add_sender("佐藤花子")
        session.event_name = "展示会"

        session.generate()

        composer.compose.assert_called_once_with(
            CardInput.from_text("株式会社サンプル\n鈴木一郎"), "佐藤花子", "展示会"
        )

    def test_missing_image_reported(self, session, composer):
        assert session.generate() is None
        assert session.error == "名刺の画像をアップロードしてください。"
        composer.compose.assert_not_called()

    def test_blank_text_reported(self, session, composer):
        session.set_mode(InputMode.TEXT)
        session.set_text("  \n ")

        assert session.generate() is None
        assert session.error == "名刺のテキスト情報を入力してください。"
        composer.compose.assert_not_called()

    def test_busy_refuses_resubmission(self, session, composer):
        session.set_mode(InputMode.TEXT)
        session.set_text("text")
        session.busy = True

        assert session.can_generate is False
        assert session.generate() is None
        composer.compose.assert_not_called()

    def test_busy_while_in_flight(self, session, composer):
        """Test busy is set during the call and cleared afterwards."""
        observed = []

        def compose(*args):
            observed.append(session.busy)
            return RESULT

        composer.compose.side_effect = compose
        session.set_mode(InputMode.TEXT)
        session.set_text("text")

        session.generate()

        assert observed == [True]
        assert session.busy is False

    def test_extraction_error_shown(self, session, composer):
        """Test failures become the error message and clear the old result."""
        composer.compose.side_effect = ExtractionError("APIキーが無効です。設定を確認してください。", 401)
        session.set_mode(InputMode.TEXT)
        session.set_text("text")
        session.result = RESULT

        assert session.generate() is None
        assert session.error == "APIキーが無効です。設定を確認してください。"
        assert session.result is None
        assert session.busy is False

    def test_unexpected_error_shown(self, session, composer):
        """Test any other failure is reported and the session stays usable."""
        composer.compose.side_effect = [RuntimeError("boom"), RESULT]
        session.set_mode(InputMode.TEXT)
        session.set_text("text")

        assert session.generate() is None
        assert session.error == "予期せぬエラーが発生しました。"
        assert session.busy is False

        assert session.generate() is RESULT
        assert session.error is None

    def test_new_result_replaces_old(self, session, composer):
        newer = GeneratedEmail(subject="新", body="新しい本文")
        composer.compose.side_effect = [RESULT, newer]
        session.set_mode(InputMode.TEXT)
        session.set_text("text")

        session.generate()
        session.generate()

        assert session.result is newer


class TestCopy:
    """Test clipboard copy and the transient copied mark."""

    def test_copy_subject(self, session, copier):
        session.result = RESULT

        text = session.copy("subject")

        assert text == RESULT.subject
        copier.assert_called_once_with(RESULT.subject)
        assert session.is_copied("subject") is True
        assert session.is_copied("body") is False

    def test_copied_mark_expires_after_two_seconds(self, session, clock):
        session.result = RESULT
        session.copy("body")

        clock.now = 101.9
        assert session.is_copied("body") is True
        clock.now = 102.0
        assert session.is_copied("body") is False

    def test_copy_without_result(self, session):
        with pytest.raises(ValueError, match="Nothing to copy"):
            session.copy("subject")

    def test_copy_unknown_field(self, session):
        session.result = RESULT
        with pytest.raises(ValueError, match="Unknown field"):
            session.copy("cc")
