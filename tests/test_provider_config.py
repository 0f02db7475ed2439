"""Tests for capabilities/config.py."""

import json

from capabilities import (
    CommandProviderConfig,
    NetworkProviderConfig,
    TransportKind,
    load_provider_configs,
    parse_provider_config,
    parse_provider_configs,
)


class TestParseProviderConfig:
    """Shape-based resolution of raw entries."""

    def test_command_entry(self):
        config = parse_provider_config("fs", {"command": "npx", "args": ["-y", "server-fs"], "env": {"A": "1"}})

        assert isinstance(config, CommandProviderConfig)
        assert config.transport == TransportKind.SUBPROCESS
        assert config.args == ["-y", "server-fs"]
        assert config.env == {"A": "1"}
        assert config.enabled is True

    def test_url_entry(self):
        config = parse_provider_config("web", {"url": "http://localhost:8080/sse", "headers": {"X": "y"}})

        assert isinstance(config, NetworkProviderConfig)
        assert config.transport == TransportKind.NETWORK
        assert config.headers == {"X": "y"}

    def test_disabled_flag_is_kept(self):
        config = parse_provider_config("fs", {"command": "npx", "enabled": False})

        assert config.enabled is False

    def test_unknown_shape_is_skipped(self):
        assert parse_provider_config("odd", {"something": "else"}) is None

    def test_invalid_types_are_skipped(self):
        assert parse_provider_config("bad", {"command": "npx", "args": "not-a-list"}) is None

    def test_non_mapping_is_skipped(self):
        assert parse_provider_config("bad", ["npx"]) is None


class TestParseProviderConfigs:
    """Whole-section parsing."""

    def test_duplicate_names_last_wins(self):
        configs = parse_provider_configs([
            ("fs", {"command": "first"}),
            ("fs", {"command": "second"}),
        ])

        assert list(configs) == ["fs"]
        assert configs["fs"].command == "second"

    def test_invalid_entries_are_dropped(self):
        configs = parse_provider_configs({
            "fs": {"command": "npx"},
            "broken": {"nothing": True},
        })

        assert list(configs) == ["fs"]


class TestLoadProviderConfigs:
    """Reading .chara.json files."""

    def test_missing_file_yields_no_providers(self, tmp_path):
        assert load_provider_configs(tmp_path / "missing.json") == {}

    def test_reads_mcp_servers_section(self, tmp_path):
        path = tmp_path / ".chara.json"
        path.write_text(json.dumps({
            "mcpServers": {
                "fs": {"command": "npx", "args": ["server-fs"], "env": {"ROOT": "/tmp"}},
                "web": {"url": "http://localhost:3001/sse"},
            }
        }))

        configs = load_provider_configs(path)

        assert set(configs) == {"fs", "web"}
        assert configs["fs"].env == {"ROOT": "/tmp"}
        assert isinstance(configs["web"], NetworkProviderConfig)

    def test_duplicate_keys_in_file_last_wins(self, tmp_path):
        path = tmp_path / ".chara.json"
        path.write_text(
            '{"mcpServers": {"fs": {"command": "one"}, "fs": {"command": "two"}}}'
        )

        configs = load_provider_configs(path)

        assert configs["fs"].command == "two"

    def test_missing_section(self, tmp_path):
        path = tmp_path / ".chara.json"
        path.write_text(json.dumps({"other": {}}))

        assert load_provider_configs(path) == {}
