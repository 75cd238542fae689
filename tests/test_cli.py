"""
Test Command Line Module
========================

Tests for the main entry point.
"""

import json
import os

import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from main import load_context, main, parse_args
from core.exceptions import ResponderError


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    for name in list(os.environ):
        if name.startswith("RULE_RESPONDER_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("RULE_RESPONDER_CONFIG_DIR", str(tmp_path / "config"))
    return tmp_path / "config"


@pytest.fixture
def rules_dir(tmp_path):
    root = tmp_path / "rules"
    root.mkdir()
    (root / "chat.json").write_text(json.dumps([
        {"match": ["hello"], "response": "Hi {player_name}!"},
        {"match": ["hello world"], "response": "Hello, world."},
    ]))
    return root


class TestParseArgs:
    """Tests for argument parsing."""

    def test_modes_are_exclusive(self):
        """Only one mode may be chosen."""
        with pytest.raises(SystemExit):
            parse_args(["--status", "--web"])

    def test_test_mode(self):
        """The test message is captured."""
        args = parse_args(["--test", "where am i", "--rules-dir", "rules"])
        assert args.test == "where am i"
        assert args.rules_dir == "rules"


class TestMain:
    """Tests for main()."""

    def test_match_prints_every_response(self, config_dir, rules_dir, tmp_path, capsys):
        """All matching responses are printed in order."""
        context = tmp_path / "context.yaml"
        context.write_text("player:\n  name: Alex\n")

        code = main(["--test", "hello big world", "--rules-dir", str(rules_dir),
                     "--context", str(context)])

        out = capsys.readouterr().out
        assert code == 0
        assert "[1] Hi Alex!" in out
        assert "[2] Hello, world." in out

    def test_no_match_exit_code(self, config_dir, rules_dir, capsys):
        """No match exits with 1."""
        assert main(["--test", "goodbye", "--rules-dir", str(rules_dir)]) == 1
        assert "No rule matched." in capsys.readouterr().out

    def test_status_seeds_default_rules(self, config_dir, capsys):
        """The default rule tree is created under the config directory."""
        assert main(["--status"]) == 0

        out = capsys.readouterr().out
        assert "Rules:" in out
        assert (config_dir / "rules" / "data.json").exists()

    def test_placeholders(self, config_dir, capsys):
        """Placeholders are listed one per line."""
        assert main(["--placeholders"]) == 0
        assert "{player_name}" in capsys.readouterr().out.splitlines()

    def test_config_error(self, config_dir, capsys):
        """An invalid configuration exits with 2."""
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text("rules:\n  candidate_strategy: fastest\n")

        assert main(["--status"]) == 2
        assert "Configuration error" in capsys.readouterr().err

    def test_bad_context_file(self, config_dir, rules_dir, tmp_path, capsys):
        """An unreadable context file is reported, not raised."""
        assert main(["--test", "hello", "--rules-dir", str(rules_dir),
                     "--context", str(tmp_path / "missing.yaml")]) == 1
        assert "Failed to read context file" in capsys.readouterr().err

    def test_no_mode(self, config_dir, capsys):
        """Without a mode a hint is printed."""
        assert main([]) == 0
        assert "No mode specified" in capsys.readouterr().out


class TestLoadContext:
    """Tests for context files."""

    def test_json_context(self, tmp_path):
        """JSON files are valid context files."""
        path = tmp_path / "context.json"
        path.write_text('{"world": {"name": "nether"}}')
        assert load_context(str(path)).get("world.name") == "nether"

    def test_non_mapping(self, tmp_path):
        """A context file must hold a mapping."""
        path = tmp_path / "context.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ResponderError):
            load_context(str(path))


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
