#!/usr/bin/env python3
"""
Test suite for diary.py — config loading, console report and exit codes
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import diary
from diary import ConfigError, load_config, run, main, choose_resolver, choose_sort_mode
from diarylib.constants import DEFAULT_CONFIG
from diarylib.report import SortMode
from diarylib.source import FixedPathResolver, ManualPathResolver, DialogSourceResolver

HEADER = "Date,Name,Year,Letterboxd URI,Rating,Rewatch,Tags,Watched Date"

DIARY_LINES = [
    HEADER,
    '2024-03-01,"Movie, The",2023,https://boxd.it/a,4.5,No,,2024-02-28',
    "2024-02-01,Heat,1995,https://boxd.it/b,5,Yes,cinema,",
    "2024-01-15,broken",
    "2024-01-10",
    "2024-01-01,Ronin,1998,https://boxd.it/c,,,,",
]


@pytest.fixture
def diary_csv(tmp_path):
    path = tmp_path / "diary.csv"
    path.write_text("\n".join(DIARY_LINES) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def console():
    lines = []

    def out(*args):
        lines.append(" ".join(str(a) for a in args))

    out.lines = lines
    return out


def no_input(prompt):
    raise AssertionError(f"unexpected prompt: {prompt}")


class TestLoadConfig:

    def test_missing_optional_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "config.yaml") == DEFAULT_CONFIG

    def test_missing_required_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "custom.yaml", required=True)

    def test_values_override_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("default_sort: rating\npause_on_exit: true\n")
        config = load_config(path)
        assert config["default_sort"] == "rating"
        assert config["pause_on_exit"] is True
        assert config["encoding"] == DEFAULT_CONFIG["encoding"]

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("colour: blue\n")
        assert "colour" not in load_config(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == DEFAULT_CONFIG

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("default_sort: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_default_sort(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("default_sort: shuffle\n")
        with pytest.raises(ConfigError):
            load_config(path)

    @pytest.mark.parametrize("text", [
        "pause_on_exit: \"false\"\n",
        "encoding: 8\n",
        "default_sort: 4\n",
        "dialog_title: null\n",
    ])
    def test_wrong_value_type(self, tmp_path, text):
        path = tmp_path / "config.yaml"
        path.write_text(text)
        with pytest.raises(ConfigError):
            load_config(path)

    def test_quoted_boolean_does_not_pause(self, diary_csv, tmp_path, monkeypatch):
        config = tmp_path / "custom.yaml"
        config.write_text("pause_on_exit: \"false\"\n")
        prompts = []
        monkeypatch.setattr("builtins.input", lambda prompt="": prompts.append(prompt) or "")
        assert main([str(diary_csv), "--config", str(config)]) == 1
        assert prompts == []

    def test_shipped_config_loads(self):
        shipped = Path(__file__).parent.parent / "config.yaml"
        assert load_config(shipped, required=True) == DEFAULT_CONFIG


class TestMenus:

    def test_browse_choice(self, console):
        resolver = choose_resolver(DEFAULT_CONFIG, ask=lambda p: "1", out=console)
        assert isinstance(resolver, DialogSourceResolver)

    def test_manual_choice(self, console):
        resolver = choose_resolver(DEFAULT_CONFIG, ask=lambda p: "2", out=console)
        assert isinstance(resolver, ManualPathResolver)

    def test_invalid_choice(self, console):
        assert choose_resolver(DEFAULT_CONFIG, ask=lambda p: "9", out=console) is None
        assert "Invalid choice." in console.lines

    def test_sort_menu_enter_keeps_default(self, console):
        assert choose_sort_mode(SortMode.RATING, ask=lambda p: "", out=console) is SortMode.RATING

    def test_sort_menu_number(self, console):
        assert choose_sort_mode(SortMode.RECENCY, ask=lambda p: "3", out=console) is SortMode.ALPHABETICAL

    def test_sort_menu_unknown_keeps_default(self, console):
        assert choose_sort_mode(SortMode.RECENCY, ask=lambda p: "9", out=console) is SortMode.RECENCY


class TestRun:

    def test_report_output(self, diary_csv, console):
        status = run(FixedPathResolver(diary_csv), dict(DEFAULT_CONFIG),
                     sort_mode=SortMode.RECENCY, ask=no_input, out=console)
        text = "\n".join(console.lines)

        assert status == 0
        assert "Found 4 watched movies!" in text
        assert "1. Movie, The (2023)" in text
        assert "   Watched: 2024-02-28" in text
        assert "   Rating: **** ½ (4.5/5)" in text
        assert "2. Heat (1995)" in text
        assert "   Watched: 2024-02-01" in text
        assert "   [REWATCH]" in text
        assert "   Tags: cinema" in text
        assert "4. Ronin (1998)" in text
        assert "Total movies watched: 4" in text
        assert "Average rating: 4.75/5 (based on 2 rated films)" in text
        assert "Rewatches: 1" in text
        assert "Skipped 1 malformed lines:" in text
        assert "line 5: too_few_fields - 2024-01-10" in text

    def test_two_field_line_kept(self, diary_csv, console):
        run(FixedPathResolver(diary_csv), dict(DEFAULT_CONFIG),
            sort_mode=SortMode.RECENCY, ask=no_input, out=console)
        assert "3. broken" in console.lines

    def test_sort_mode_applied(self, diary_csv, console):
        run(FixedPathResolver(diary_csv), dict(DEFAULT_CONFIG),
            sort_mode=SortMode.ALPHABETICAL, ask=no_input, out=console)
        numbered = [line for line in console.lines if line[:2] in ("1.", "2.", "3.", "4.")]
        assert numbered[0].startswith("1. Heat")

    def test_sort_menu_used_when_mode_missing(self, diary_csv, console):
        run(FixedPathResolver(diary_csv), dict(DEFAULT_CONFIG),
            sort_mode=None, ask=lambda p: "4", out=console)
        assert "1. Heat (1995)" in console.lines

    def test_missing_file_exit_code(self, tmp_path, console):
        status = run(FixedPathResolver(tmp_path / "missing.csv"), dict(DEFAULT_CONFIG),
                     sort_mode=SortMode.RECENCY, ask=no_input, out=console)
        assert status == 1
        assert any("Could not open file" in line for line in console.lines)

    def test_header_only_file(self, tmp_path, console):
        path = tmp_path / "diary.csv"
        path.write_text(HEADER + "\n")
        status = run(FixedPathResolver(path), dict(DEFAULT_CONFIG),
                     sort_mode=SortMode.RECENCY, ask=no_input, out=console)
        assert status == 0
        assert "No movies found in file." in console.lines

    def test_nothing_selected(self, console):
        status = run(ManualPathResolver(prompt_fn=lambda p: ""), dict(DEFAULT_CONFIG),
                     ask=no_input, out=console)
        assert status == 0
        assert "No file selected." in console.lines


class TestMain:

    def test_explicit_missing_config(self, diary_csv, tmp_path):
        status = main([str(diary_csv), "--sort", "rating", "--config", str(tmp_path / "none.yaml")])
        assert status == 1  # explicit --config that does not exist

    def test_path_argument_default_config(self, diary_csv, capsys, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        status = main([str(diary_csv), "--sort", "rating"])
        out = capsys.readouterr().out
        assert status == 0
        assert "1. Heat (1995)" in out

    def test_default_sort_from_config(self, diary_csv, capsys, tmp_path):
        config = tmp_path / "custom.yaml"
        config.write_text("default_sort: chronological\n")
        status = main([str(diary_csv), "--config", str(config)])
        out = capsys.readouterr().out
        assert status == 0
        assert "1. Ronin (1998)" in out

    def test_missing_file_status(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        assert main([str(tmp_path / "missing.csv")]) == 1

    def test_unexpected_error_is_contained(self, diary_csv, monkeypatch, capsys, tmp_path):
        monkeypatch.chdir(tmp_path)

        def explode(*args, **kwargs):
            raise RuntimeError("kaboom")

        monkeypatch.setattr(diary, "build_report", explode)
        status = main([str(diary_csv)])
        assert status == 1
        assert "ERROR: kaboom" in capsys.readouterr().err

    def test_invalid_sort_rejected(self, diary_csv):
        with pytest.raises(SystemExit):
            main([str(diary_csv), "--sort", "shuffle"])

    def test_interactive_invalid_choice(self, monkeypatch, capsys, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("builtins.input", lambda prompt="": "7")
        assert main([]) == 0
        assert "Invalid choice." in capsys.readouterr().out

    def test_pause_waits_for_enter(self, diary_csv, monkeypatch, capsys, tmp_path):
        monkeypatch.chdir(tmp_path)
        prompts = []
        monkeypatch.setattr("builtins.input", lambda prompt="": prompts.append(prompt) or "")
        assert main([str(diary_csv), "--pause"]) == 0
        assert prompts == ["\nPress Enter to exit..."]
