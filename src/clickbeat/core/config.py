"""Runtime configuration for clickbeat.

Configuration is read once at startup from a YAML file and turned into
immutable dataclasses that are passed into each component. Nothing else in
the package reads the environment or the file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from clickbeat.core.errors import ConfigError

CONFIG_PATH_ENV = "CONFIG_PATH"
DEFAULT_CONFIG_PATH = "/etc/clickbeat/config.yaml"

REDIS_MODES = ("list", "pubsub")
TCP_FORMATS = ("json", "json_lines")


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass(frozen=True)
class ClickHouseConfig:
    """Connection settings for the ClickHouse HTTP interface.

    Attributes:
        host: Server host name.
        port: HTTP interface port.
        database: Target database.
        table: Target table.
        user: User for basic auth; empty disables auth.
        password: Password for basic auth.
        timeout: Request timeout in seconds.
    """

    host: str = "clickhouse"
    port: int = 8123
    database: str = "logs"
    table: str = "logs_table"
    user: str = ""
    password: str = ""
    timeout: float = 30.0

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/"

    @property
    def insert_query(self) -> str:
        return f"INSERT INTO {self.database}.{self.table} FORMAT JSONEachRow"


@dataclass(frozen=True)
class KafkaInputConfig:
    enabled: bool = False
    brokers: tuple[str, ...] = ()
    topics: tuple[str, ...] = ()
    group_id: str = ""
    auto_commit: bool = True


@dataclass(frozen=True)
class RedisInputConfig:
    enabled: bool = False
    address: str = ""
    password: str = ""
    mode: str = "list"
    key: str = ""


@dataclass(frozen=True)
class FileInputConfig:
    enabled: bool = False
    paths: tuple[str, ...] = ()
    follow: bool = False


@dataclass(frozen=True)
class TCPInputConfig:
    enabled: bool = False
    port: int = 0
    format: str = "json_lines"


@dataclass(frozen=True)
class InputsConfig:
    kafka: KafkaInputConfig = field(default_factory=KafkaInputConfig)
    redis: RedisInputConfig = field(default_factory=RedisInputConfig)
    file: FileInputConfig = field(default_factory=FileInputConfig)
    tcp: TCPInputConfig = field(default_factory=TCPInputConfig)


@dataclass(frozen=True)
class AppConfig:
    """Validated application configuration.

    Attributes:
        server: HTTP listener settings.
        clickhouse: Store connection settings.
        inputs: Non-HTTP producer settings.
        log_level: Logging level name (e.g. "info", "debug").
    """

    server: ServerConfig = field(default_factory=ServerConfig)
    clickhouse: ClickHouseConfig = field(default_factory=ClickHouseConfig)
    inputs: InputsConfig = field(default_factory=InputsConfig)
    log_level: str = "info"

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> "AppConfig":
        """Build config from a decoded YAML document.

        Missing, empty or zero values take their defaults.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        if data is None:
            data = {}
        elif not isinstance(data, dict):
            raise ConfigError("configuration root must be a mapping")
        server = _section(data, "server")
        clickhouse = _section(data, "clickhouse")
        inputs = _section(data, "inputs")
        kafka = _section(inputs, "kafka", "inputs.")
        redis = _section(inputs, "redis", "inputs.")
        file = _section(inputs, "file", "inputs.")
        tcp = _section(inputs, "tcp", "inputs.")

        redis_mode = _str(redis, "mode", "list", "inputs.redis.")
        if redis_mode not in REDIS_MODES:
            raise ConfigError(
                f"inputs.redis.mode must be one of {REDIS_MODES}, got '{redis_mode}'"
            )
        tcp_format = _str(tcp, "format", "json_lines", "inputs.tcp.")
        if tcp_format not in TCP_FORMATS:
            raise ConfigError(
                f"inputs.tcp.format must be one of {TCP_FORMATS}, got '{tcp_format}'"
            )

        return cls(
            server=ServerConfig(
                host=_str(server, "host", "0.0.0.0", "server."),
                port=_port(server, "port", 8080, "server."),
            ),
            clickhouse=ClickHouseConfig(
                host=_str(clickhouse, "host", "clickhouse", "clickhouse."),
                port=_port(clickhouse, "port", 8123, "clickhouse."),
                database=_str(clickhouse, "database", "logs", "clickhouse."),
                table=_str(clickhouse, "table", "logs_table", "clickhouse."),
                user=_str(clickhouse, "user", "", "clickhouse."),
                password=_str(clickhouse, "password", "", "clickhouse."),
            ),
            inputs=InputsConfig(
                kafka=KafkaInputConfig(
                    enabled=_bool(kafka, "enabled", False, "inputs.kafka."),
                    brokers=_str_list(kafka, "brokers", "inputs.kafka."),
                    topics=_str_list(kafka, "topics", "inputs.kafka."),
                    group_id=_str(kafka, "group_id", "", "inputs.kafka."),
                    auto_commit=_bool(kafka, "auto_commit", True, "inputs.kafka."),
                ),
                redis=RedisInputConfig(
                    enabled=_bool(redis, "enabled", False, "inputs.redis."),
                    address=_str(redis, "address", "", "inputs.redis."),
                    password=_str(redis, "password", "", "inputs.redis."),
                    mode=redis_mode,
                    key=_str(redis, "key", "", "inputs.redis."),
                ),
                file=FileInputConfig(
                    enabled=_bool(file, "enabled", False, "inputs.file."),
                    paths=_str_list(file, "paths", "inputs.file."),
                    follow=_bool(file, "follow", False, "inputs.file."),
                ),
                tcp=TCPInputConfig(
                    enabled=_bool(tcp, "enabled", False, "inputs.tcp."),
                    port=_port(tcp, "port", 0, "inputs.tcp."),
                    format=tcp_format,
                ),
            ),
            log_level=_str(data, "log_level", "info").lower(),
        )


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: File to read. Defaults to $CONFIG_PATH, then
            /etc/clickbeat/config.yaml.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file cannot be read or parsed, or holds
            invalid values.
    """
    config_path = Path(path or os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as error:
        raise ConfigError(f"cannot read config file {config_path}: {error}") from error
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as error:
        raise ConfigError(f"cannot parse config file {config_path}: {error}") from error
    return AppConfig.from_mapping(data)


def _section(data: dict[str, Any], key: str, prefix: str = "") -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        kind = type(value).__name__
        raise ConfigError(f"{prefix}{key} must be a mapping, got {kind}")
    return value


def _str(data: dict[str, Any], key: str, default: str, prefix: str = "") -> str:
    value = data.get(key)
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        raise ConfigError(f"{prefix}{key} must be a string, got {value!r}")
    return value


def _port(data: dict[str, Any], key: str, default: int, prefix: str = "") -> int:
    value = data.get(key)
    if value is None or value == 0:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or not 0 < value < 65536:
        raise ConfigError(f"{prefix}{key} must be a port number, got {value!r}")
    return value


def _bool(data: dict[str, Any], key: str, default: bool, prefix: str = "") -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigError(f"{prefix}{key} must be true or false, got {value!r}")
    return value


def _str_list(data: dict[str, Any], key: str, prefix: str = "") -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{prefix}{key} must be a list of strings, got {value!r}")
    return tuple(value)
