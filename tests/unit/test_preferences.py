"""Unit tests for photoprint/preferences.py."""

import json
from pathlib import Path

import pytest

from photoprint import preferences
from photoprint.preferences import (
    Settings,
    load_settings,
    save_settings,
    settings_from_dict,
    settings_to_dict,
)
from photoprint.validation import IncompletePageMode, LayoutType, MarginConfig, PaperSize


class TestLoadSettings:
    """Tests for reading the preference file."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """Test that no file means default settings."""
        settings = load_settings(tmp_path / "settings.json")
        assert settings == Settings()
        assert settings.layout is LayoutType.FOUR_PER_PAGE
        assert settings.paper_size is PaperSize.A4
        assert settings.margins == MarginConfig(top_mm=8, bottom_mm=25, left_mm=8, right_mm=8)

    def test_corrupt_json_gives_defaults(self, tmp_path: Path) -> None:
        """Test that an unparsable file is ignored."""
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert load_settings(path) == Settings()

    def test_non_object_json_gives_defaults(self, tmp_path: Path) -> None:
        """Test that a JSON list is ignored."""
        path = tmp_path / "settings.json"
        path.write_text("[1, 2, 3]")
        assert load_settings(path) == Settings()

    def test_invalid_values_fall_back_per_key(self, tmp_path: Path) -> None:
        """Test that bad keys use defaults while good keys are kept."""
        path = tmp_path / "settings.json"
        path.write_text(
            json.dumps(
                {
                    "layout_type": "SIX_PER_PAGE",
                    "paper_size": "LETTER",
                    "margin_top": -3,
                    "margin_bottom": 30,
                    "margin_left": "wide",
                    "copies": 0,
                    "dpi": 150,
                }
            )
        )

        settings = load_settings(path)

        assert settings.layout is LayoutType.FOUR_PER_PAGE
        assert settings.paper_size is PaperSize.LETTER
        assert settings.margins.top_mm == 8
        assert settings.margins.bottom_mm == 30
        assert settings.margins.left_mm == 8
        assert settings.copies == 1
        assert settings.dpi == 150


class TestSaveSettings:
    """Tests for writing the preference file."""

    def test_roundtrip(self, tmp_path: Path) -> None:
        """Test that saved settings load back unchanged."""
        path = tmp_path / "nested" / "settings.json"
        settings = Settings(
            layout=LayoutType.THREE_PER_PAGE,
            paper_size=PaperSize.PHOTO_5X7,
            margins=MarginConfig.preset("minimal"),
            incomplete_page_mode=IncompletePageMode.FILL_LAYOUT,
            copies=3,
            dpi=600,
        )

        save_settings(settings, path)

        assert load_settings(path) == settings
        assert list(path.parent.iterdir()) == [path]

    def test_flat_keys(self) -> None:
        """Test the stored key names."""
        data = settings_to_dict(Settings())
        assert data["layout_type"] == "FOUR_PER_PAGE"
        assert data["paper_size"] == "A4"
        assert (data["margin_top"], data["margin_bottom"]) == (8, 25)
        assert settings_from_dict(data) == Settings()

    def test_partial_dict(self) -> None:
        """Test that missing keys keep their defaults."""
        settings = settings_from_dict({"margin_left": 12})
        assert settings.margins.left_mm == 12
        assert settings.margins.bottom_mm == 25
        assert settings.layout is LayoutType.FOUR_PER_PAGE

    def test_failed_write_leaves_no_temp_file(self, tmp_path: Path, monkeypatch) -> None:
        """Test that an error while serialising removes the temporary file."""
        path = tmp_path / "settings.json"

        def fail_dump(*args, **kwargs) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(preferences.json, "dump", fail_dump)

        with pytest.raises(OSError, match="disk full"):
            save_settings(Settings(), path)

        assert list(tmp_path.iterdir()) == []
