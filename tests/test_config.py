"""Tests for dipindex.lib.config, envparse and status_config modules."""

import pytest
from pathlib import Path
from unittest.mock import patch

from dipindex.lib.config import CollectionConfig, load_collection_config
from dipindex.lib.constants import DEFAULT_GLOB, STATUSES
from dipindex.lib.envparse import load_env, parse_env
from dipindex.lib.status_config import StatusConfig, load_status_config


class TestParseEnv:
    """Test the safe env parser."""

    def test_parses_keys_and_strips_quotes(self):
        env = parse_env('DIP_GLOB="*.md"\nRECURSIVE=true\n# comment\n\n')
        assert env == {"DIP_GLOB": "*.md", "RECURSIVE": "true"}

    def test_accepts_export_prefix(self):
        assert parse_env("export RECURSIVE=false") == {"RECURSIVE": "false"}

    def test_rejects_missing_equals(self):
        with pytest.raises(ValueError, match="Line 1"):
            parse_env("RECURSIVE")

    def test_rejects_lowercase_key(self):
        with pytest.raises(ValueError, match="Invalid key"):
            parse_env("dip_glob=*.md")

    def test_rejects_command_substitution(self):
        with pytest.raises(ValueError, match="Forbidden pattern"):
            parse_env("DIP_GLOB=$(rm -rf /)")

    def test_mismatched_quotes_kept(self):
        assert parse_env("DIP_GLOB=\"*.md'") == {"DIP_GLOB": "\"*.md'"}

    def test_later_assignment_wins(self):
        assert parse_env("RECURSIVE=true\nRECURSIVE=false\n") == {"RECURSIVE": "false"}

    def test_error_names_line_and_key(self):
        with pytest.raises(ValueError, match="Line 2: Forbidden pattern in value for 'DIP_GLOB'"):
            parse_env("RECURSIVE=true\nDIP_GLOB='*.md | sh'\n")

    def test_load_env_accepts_path(self, tmp_path):
        (tmp_path / "dips.env").write_text("STRICT_STATUS=false\n")
        assert load_env(tmp_path / "dips.env") == {"STRICT_STATUS": "false"}

    def test_load_env_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_env(str(tmp_path / "dips.env"))


class TestLoadCollectionConfig:
    """Test load_collection_config."""

    def test_defaults_without_files(self, tmp_path):
        config = load_collection_config(tmp_path)
        assert config.glob == DEFAULT_GLOB
        assert config.recursive is False
        assert config.strict_status is True
        assert config.statuses.statuses == STATUSES

    def test_reads_dips_env(self, tmp_path):
        (tmp_path / "dips.env").write_text('DIP_GLOB="*.md"\nRECURSIVE=yes\nSTRICT_STATUS=false\n')
        config = load_collection_config(tmp_path)
        assert config.glob == "*.md"
        assert config.recursive is True
        assert config.strict_status is False

    @patch("dipindex.lib.config.envparse.load_env")
    def test_unknown_bool_falls_back_with_warning(self, mock_load_env, tmp_path, caplog):
        (tmp_path / "dips.env").write_text("")
        mock_load_env.return_value = {"RECURSIVE": "maybe"}
        config = load_collection_config(tmp_path)
        assert config.recursive is False
        assert "Unknown RECURSIVE 'maybe'" in caplog.text

    @patch("dipindex.lib.config.envparse.load_env")
    def test_empty_glob_falls_back(self, mock_load_env, tmp_path, caplog):
        (tmp_path / "dips.env").write_text("")
        mock_load_env.return_value = {"DIP_GLOB": "  "}
        config = load_collection_config(tmp_path)
        assert config.glob == DEFAULT_GLOB
        assert "Empty DIP_GLOB" in caplog.text

    def test_malformed_env_raises(self, tmp_path):
        (tmp_path / "dips.env").write_text("not a setting\n")
        with pytest.raises(ValueError):
            load_collection_config(tmp_path)


class TestStatusConfig:
    """Test status normalization and statuses.yaml loading."""

    def test_normalize_is_case_insensitive(self):
        config = StatusConfig()
        assert config.normalize("accepted") == "Accepted"
        assert config.normalize("  FORMAL   review ") == "Formal Review"

    def test_normalize_ignores_parenthetical(self):
        assert StatusConfig().normalize("Withdrawn (superseded by DIP1011)") == "Withdrawn"

    def test_normalize_builtin_alias(self):
        assert StatusConfig().normalize("Accepted with Modification") == "Accepted with modifications"

    def test_normalize_unknown(self):
        assert StatusConfig().normalize("Pending") is None
        assert StatusConfig().normalize("") is None

    def test_defaults_when_no_directory(self):
        assert load_status_config(None).statuses == STATUSES

    def test_loads_extra_and_aliases(self, tmp_path):
        (tmp_path / "statuses.yaml").write_text(
            "extra:\n  - Experimental\naliases:\n  Approved: accepted\n"
        )
        config = load_status_config(tmp_path)
        assert "Experimental" in config.statuses
        assert config.normalize("experimental") == "Experimental"
        assert config.normalize("Approved") == "Accepted"
        # Built-ins still present
        assert config.normalize("Draft") == "Draft"

    def test_alias_to_unknown_status_is_skipped(self, tmp_path, caplog):
        (tmp_path / "statuses.yaml").write_text("aliases:\n  Approved: Blessed\n")
        config = load_status_config(tmp_path)
        assert config.normalize("Approved") is None
        assert "unknown status 'Blessed'" in caplog.text

    def test_invalid_yaml_returns_defaults(self, tmp_path, caplog):
        (tmp_path / "statuses.yaml").write_text("extra: [unclosed\n")
        config = load_status_config(tmp_path)
        assert config.statuses == STATUSES
        assert "Failed to parse" in caplog.text

    def test_collection_config_uses_status_file(self, tmp_path):
        (tmp_path / "statuses.yaml").write_text("extra: [Experimental]\n")
        config = load_collection_config(tmp_path)
        assert isinstance(config, CollectionConfig)
        assert "Experimental" in config.statuses.statuses
