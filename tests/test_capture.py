"""Tests for input capture."""

import base64

import pytest

from card_mailer.capture import parse_data_uri, read_image_as_data_uri, size_limit_message
from card_mailer.errors import InputValidationError
from card_mailer.models.email import CardInput, InputMode

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


def make_sparse_file(path, size):
    """Create a file of the given size without writing its contents."""
    with open(path, "wb") as f:
        f.truncate(size)
    return path


class TestReadImageAsDataUri:
    """Test read_image_as_data_uri."""

    def test_png(self, tmp_path):
        """Test media type from suffix and base64 payload."""
        path = tmp_path / "card.png"
        path.write_bytes(PNG_BYTES)

        uri = read_image_as_data_uri(path)

        assert uri == "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()

    def test_jpeg(self, tmp_path):
        path = tmp_path / "card.JPG"
        path.write_bytes(b"\xff\xd8\xff")
        assert read_image_as_data_uri(path).startswith("data:image/jpeg;base64,")

    def test_unknown_suffix_defaults_to_png(self, tmp_path):
        path = tmp_path / "card"
        path.write_bytes(PNG_BYTES)
        assert read_image_as_data_uri(path).startswith("data:image/png;base64,")

    def test_oversized_file_rejected(self, tmp_path):
        """Test a 6 MiB image is rejected with the localized message."""
        path = make_sparse_file(tmp_path / "big.png", 6 * 1024 * 1024)

        with pytest.raises(InputValidationError) as exc_info:
            read_image_as_data_uri(path)

        assert exc_info.value.message == "画像サイズは5MB以下にしてください。"
        assert exc_info.value.details["size"] == 6 * 1024 * 1024

    def test_exactly_at_limit_accepted(self, tmp_path):
        path = make_sparse_file(tmp_path / "edge.png", 1024)
        assert read_image_as_data_uri(path, max_bytes=1024).startswith("data:image/png")

    def test_custom_limit_message(self):
        assert size_limit_message(10 * 1024 * 1024) == "画像サイズは10MB以下にしてください。"

    def test_non_image_rejected(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(InputValidationError, match="画像ファイルを選択してください"):
            read_image_as_data_uri(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Image not found"):
            read_image_as_data_uri(tmp_path / "missing.png")


class TestParseDataUri:
    """Test parse_data_uri."""

    def test_well_formed(self):
        assert parse_data_uri("data:image/webp;base64,UklGRg==") == ("image/webp", "UklGRg==")

    def test_missing_base64_marker(self):
        """Test fallback to image/png and the text after the comma."""
        assert parse_data_uri("data:image/jpeg,AAAA") == ("image/png", "AAAA")

    def test_bare_payload(self):
        assert parse_data_uri("AAAA") == ("image/png", "AAAA")


class TestCardInput:
    """Test CardInput exclusivity."""

    def test_image(self):
        card = CardInput.from_image("data:image/png;base64,AAAA")
        assert card.mode is InputMode.IMAGE
        assert card.text is None

    def test_text(self):
        card = CardInput.from_text("山田太郎")
        assert card.mode is InputMode.TEXT

    def test_both_rejected(self):
        with pytest.raises(InputValidationError):
            CardInput(image_data_uri="data:image/png;base64,AAAA", text="山田")

    def test_neither_rejected(self):
        with pytest.raises(InputValidationError):
            CardInput()
