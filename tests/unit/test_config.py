"""Tests for configuration loading."""

from pathlib import Path

import pytest

from clickbeat.core.config import AppConfig, ClickHouseConfig, load_config
from clickbeat.core.errors import ConfigError

FULL_CONFIG = """
server:
  host: 127.0.0.1
  port: 9000
clickhouse:
  host: ch.internal
  port: 18123
  database: weblogs
  table: events
  user: ingest
  password: secret
inputs:
  kafka:
    enabled: true
    brokers: [k1:9092, k2:9092]
    topics: [logs]
    group_id: clickbeat
  redis:
    enabled: true
    address: redis:6379
    mode: pubsub
    key: logs
  file:
    enabled: true
    paths: [/var/log/*.log]
    follow: true
  tcp:
    enabled: true
    port: 5170
    format: json
log_level: DEBUG
"""


class TestAppConfigDefaults:
    """Tests for default values."""

    @pytest.mark.config
    @pytest.mark.tier(0)
    def test_empty_document_uses_defaults(self) -> None:
        config = AppConfig.from_mapping(None)

        assert config == AppConfig()
        assert config.clickhouse.host == "clickhouse"
        assert config.clickhouse.port == 8123
        assert config.clickhouse.database == "logs"
        assert config.clickhouse.table == "logs_table"
        assert config.server.port == 8080
        assert config.log_level == "info"

    @pytest.mark.config
    @pytest.mark.tier(0)
    def test_empty_and_zero_values_take_defaults(self) -> None:
        config = AppConfig.from_mapping(
            {"clickhouse": {"host": "", "port": 0, "database": None}}
        )

        assert config.clickhouse == ClickHouseConfig()

    @pytest.mark.config
    @pytest.mark.tier(0)
    def test_insert_query_and_url(self) -> None:
        ch = ClickHouseConfig(host="db", port=9123, database="d", table="t")

        assert ch.url == "http://db:9123/"
        assert ch.insert_query == "INSERT INTO d.t FORMAT JSONEachRow"
        assert ch.timeout == 30.0


class TestLoadConfig:
    """Tests for reading YAML files."""

    @pytest.mark.config
    @pytest.mark.tier(1)
    def test_full_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(FULL_CONFIG, encoding="utf-8")

        config = load_config(path)

        assert config.server.host == "127.0.0.1"
        assert config.server.port == 9000
        assert config.clickhouse.user == "ingest"
        assert config.clickhouse.table == "events"
        assert config.inputs.kafka.brokers == ("k1:9092", "k2:9092")
        assert config.inputs.kafka.auto_commit is True
        assert config.inputs.redis.mode == "pubsub"
        assert config.inputs.file.paths == ("/var/log/*.log",)
        assert config.inputs.file.follow is True
        assert config.inputs.tcp.port == 5170
        assert config.inputs.tcp.format == "json"
        assert config.log_level == "debug"

    @pytest.mark.config
    @pytest.mark.tier(1)
    def test_path_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = tmp_path / "env.yaml"
        path.write_text("clickhouse:\n  table: from_env\n", encoding="utf-8")
        monkeypatch.setenv("CONFIG_PATH", str(path))

        assert load_config().clickhouse.table == "from_env"

    @pytest.mark.config
    @pytest.mark.tier(1)
    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(tmp_path / "absent.yaml")

    @pytest.mark.config
    @pytest.mark.tier(1)
    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("server: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="cannot parse"):
            load_config(path)


class TestValidation:
    """Tests for rejected values."""

    @pytest.mark.config
    @pytest.mark.tier(0)
    @pytest.mark.parametrize(
        ("data", "match"),
        [
            ({"server": "localhost"}, "server must be a mapping"),
            ({"clickhouse": {"port": "8123"}}, "clickhouse.port"),
            ({"clickhouse": {"port": 70000}}, "clickhouse.port"),
            ({"clickhouse": {"user": 5}}, "clickhouse.user"),
            ({"inputs": {"kafka": {"brokers": "k1"}}}, "inputs.kafka.brokers"),
            ({"inputs": {"file": {"follow": "yes"}}}, "inputs.file.follow"),
            ({"inputs": {"redis": {"mode": "stream"}}}, "inputs.redis.mode"),
            ({"inputs": {"tcp": {"format": "xml"}}}, "inputs.tcp.format"),
        ],
    )
    def test_invalid_values_raise(self, data: dict, match: str) -> None:
        with pytest.raises(ConfigError, match=match):
            AppConfig.from_mapping(data)

    @pytest.mark.config
    @pytest.mark.tier(0)
    def test_non_mapping_root_raises(self) -> None:
        with pytest.raises(ConfigError, match="root"):
            AppConfig.from_mapping(["a"])  # type: ignore[arg-type]

    @pytest.mark.config
    @pytest.mark.tier(0)
    def test_config_is_immutable(self) -> None:
        config = AppConfig()

        with pytest.raises(AttributeError):
            config.log_level = "debug"  # type: ignore[misc]
