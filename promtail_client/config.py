"""Configuration module — frozen dataclasses loaded from YAML, env vars and CLI args.

Precedence, lowest to highest: dataclass defaults, the ``client`` section of
an optional YAML file, environment variables, command-line flags.
"""

import argparse
import os
from dataclasses import dataclass, field, fields
from urllib.parse import urlparse

import yaml

from promtail_client.errors import ConfigurationError
from promtail_client.levels import LogLevel, parse_level


def parse_label_pairs(value) -> dict[str, str]:
    """Parse ``"k1=v1,k2=v2"`` (or a list of ``k=v`` strings, or a mapping)."""
    if isinstance(value, dict):
        return {str(k): str(v) for k, v in value.items()}
    if isinstance(value, str):
        value = value.split(",")

    labels = {}
    for pair in value:
        pair = pair.strip()
        if not pair:
            continue
        if "=" not in pair:
            raise ValueError(f"Label must be key=value, got {pair!r}")
        key, val = pair.split("=", 1)
        labels[key.strip()] = val.strip()
    return labels


@dataclass(frozen=True)
class ClientConfig:
    push_url: str = "http://localhost:3100/api/prom/push"
    batch_wait: float = 1.0
    batch_entries_number: int = 100
    send_level: LogLevel = LogLevel.INFO
    print_level: LogLevel = LogLevel.ERROR
    max_retry: int = 0
    retry_min_wait: float = 1.0
    retry_max_wait: float = 30.0
    queue_size: int = 5000
    timeout: float = 10.0
    labels: dict = field(default_factory=dict)
    logs_per_second: int = 5
    run_time: int = 30

    def validate(self) -> "ClientConfig":
        """Raise ConfigurationError if any threshold or the URL is unusable."""
        url = urlparse(self.push_url or "")
        if url.scheme not in ("http", "https") or not url.netloc:
            raise ConfigurationError(f"push_url must be an http(s) URL, got {self.push_url!r}")
        if self.batch_wait <= 0:
            raise ConfigurationError(f"batch_wait must be positive, got {self.batch_wait}")
        if self.batch_entries_number < 1:
            raise ConfigurationError(
                f"batch_entries_number must be at least 1, got {self.batch_entries_number}"
            )
        if self.max_retry < 0:
            raise ConfigurationError(f"max_retry must not be negative, got {self.max_retry}")
        if self.retry_min_wait < 0:
            raise ConfigurationError(f"retry_min_wait must not be negative, got {self.retry_min_wait}")
        if self.retry_max_wait < self.retry_min_wait:
            raise ConfigurationError(
                f"retry_max_wait ({self.retry_max_wait}) must be >= retry_min_wait ({self.retry_min_wait})"
            )
        if self.queue_size < 1:
            raise ConfigurationError(f"queue_size must be at least 1, got {self.queue_size}")
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if not isinstance(self.send_level, LogLevel) or not isinstance(self.print_level, LogLevel):
            raise ConfigurationError("send_level and print_level must be LogLevel values")
        return self


_CLIENT_CONVERTERS = {
    "push_url": str,
    "batch_wait": float,
    "batch_entries_number": int,
    "send_level": parse_level,
    "print_level": parse_level,
    "max_retry": int,
    "retry_min_wait": float,
    "retry_max_wait": float,
    "queue_size": int,
    "timeout": float,
    "labels": parse_label_pairs,
    "logs_per_second": int,
    "run_time": int,
}

_CLIENT_ENV = {
    "push_url": "PUSH_URL",
    "batch_wait": "BATCH_WAIT",
    "batch_entries_number": "BATCH_ENTRIES_NUMBER",
    "send_level": "SEND_LEVEL",
    "print_level": "PRINT_LEVEL",
    "max_retry": "MAX_RETRY",
    "retry_min_wait": "RETRY_MIN_WAIT",
    "retry_max_wait": "RETRY_MAX_WAIT",
    "queue_size": "QUEUE_SIZE",
    "timeout": "HTTP_TIMEOUT",
    "labels": "LABELS",
    "logs_per_second": "LOGS_PER_SECOND",
    "run_time": "RUN_TIME",
}


def _convert(values: dict, source: str) -> dict:
    known = {f.name for f in fields(ClientConfig)}
    converted = {}
    for key, raw in values.items():
        if key not in known:
            raise ConfigurationError(f"Unknown client setting {key!r} in {source}")
        try:
            converted[key] = _CLIENT_CONVERTERS[key](raw)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid value for {key} in {source}: {exc}") from exc
    return converted


def load_yaml(path: str) -> dict:
    """Load a YAML config file and return it as a dict (empty file -> {})."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Config file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def _build_client_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Promtail push client")
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--push-url", dest="push_url", type=str, default=None)
    parser.add_argument("--batch-wait", dest="batch_wait", type=str, default=None)
    parser.add_argument("--batch-entries", dest="batch_entries_number", type=str, default=None)
    parser.add_argument("--send-level", dest="send_level", type=str, default=None)
    parser.add_argument("--print-level", dest="print_level", type=str, default=None)
    parser.add_argument("--max-retry", dest="max_retry", type=str, default=None)
    parser.add_argument("--retry-min-wait", dest="retry_min_wait", type=str, default=None)
    parser.add_argument("--retry-max-wait", dest="retry_max_wait", type=str, default=None)
    parser.add_argument("--queue-size", dest="queue_size", type=str, default=None)
    parser.add_argument("--label", dest="labels", action="append", default=None,
                        help="Default label as key=value (repeatable)")
    parser.add_argument("--logs-per-second", dest="logs_per_second", type=str, default=None)
    parser.add_argument("--run-time", dest="run_time", type=str, default=None)
    return parser


def load_client_config(argv=None) -> ClientConfig:
    """Build a validated ClientConfig from YAML, env vars and CLI args.

    Pass argv for testability; when None, argparse reads sys.argv.
    """
    args = _build_client_parser().parse_args(argv)

    values: dict = {}
    config_path = args.config or os.environ.get("CONFIG_PATH")
    if config_path:
        section = load_yaml(config_path).get("client") or {}
        values.update(_convert(section, config_path))

    env_values = {
        key: os.environ[env_name]
        for key, env_name in _CLIENT_ENV.items()
        if env_name in os.environ
    }
    values.update(_convert(env_values, "environment"))

    cli_values = {
        key: getattr(args, key)
        for key in _CLIENT_CONVERTERS
        if getattr(args, key, None) is not None
    }
    values.update(_convert(cli_values, "command line"))

    return ClientConfig(**values).validate()


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3100
    push_path: str = "/api/prom/push"


def load_server_config() -> ServerConfig:
    """Build ServerConfig from environment variables with sensible defaults."""
    try:
        return ServerConfig(
            host=os.environ.get("SERVER_HOST", ServerConfig.host),
            port=int(os.environ.get("SERVER_PORT", ServerConfig.port)),
            push_path=os.environ.get("PUSH_PATH", ServerConfig.push_path),
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid server configuration: {exc}") from exc
