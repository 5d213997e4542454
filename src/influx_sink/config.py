"""Configuration models for the sink."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import TypeVar

from pydantic import BaseModel, Field, ValidationError

from influx_sink.errors import ConfigError

_ModelT = TypeVar("_ModelT", bound=BaseModel)

FIELD_PREFIX = "FIELD_"
TYPE_FIELD_PREFIX = "TYPE_FIELD_"
TAG_PREFIX = "TAG_"


class InfluxDbConfig(BaseModel):
    """Connection settings for the time-series store."""

    uri: str = Field(min_length=1)
    database: str = Field(min_length=1)
    username: str = ""
    password: str = ""
    token: str | None = None
    table: str = Field(min_length=1)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "InfluxDbConfig":
        env = os.environ if environ is None else environ
        return _validate(
            cls,
            {
                "uri": _require(env, "INFLUXDB_URI"),
                "database": _require(env, "INFLUXDB_DATABASE"),
                "username": env.get("INFLUXDB_USERNAME", ""),
                "password": env.get("INFLUXDB_PASSWORD", ""),
                "token": env.get("INFLUXDB_TOKEN"),
                "table": _require(env, "INFLUXDB_TABLE"),
            },
        )

    def auth_token(self) -> str:
        """Token for the client; falls back to v1-style `user:password` auth."""
        if self.token:
            return self.token
        return f"{self.username}:{self.password}"


class ServiceConfig(BaseModel):
    """Configures the HTTP transport."""

    max_json_payload_size: int = Field(default=65536, ge=1)
    bind_addr: str = Field(default="127.0.0.1:8080", pattern=r"^[^:]+:\d+$")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServiceConfig":
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        if "MAX_JSON_PAYLOAD_SIZE" in env:
            values["max_json_payload_size"] = env["MAX_JSON_PAYLOAD_SIZE"]
        if "BIND_ADDR" in env:
            values["bind_addr"] = env["BIND_ADDR"]
        if "LOG_LEVEL" in env:
            values["log_level"] = env["LOG_LEVEL"].upper()
        return _validate(cls, values)

    @property
    def host(self) -> str:
        return self.bind_addr.rsplit(":", 1)[0]

    @property
    def port(self) -> int:
        return int(self.bind_addr.rsplit(":", 1)[1])


class MappingConfig(BaseModel):
    """Raw extraction entries, keyed by the name that follows each prefix.

    `field_types` only holds names whose `TYPE_FIELD_` entry is present; an
    absent entry is different from an empty one.
    """

    fields: dict[str, str] = Field(default_factory=dict)
    field_types: dict[str, str] = Field(default_factory=dict)
    tags: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "MappingConfig":
        env = os.environ if environ is None else environ
        fields: dict[str, str] = {}
        field_types: dict[str, str] = {}
        tags: dict[str, str] = {}
        for key, value in env.items():
            if key.startswith(FIELD_PREFIX):
                fields[key[len(FIELD_PREFIX):]] = value
            elif key.startswith(TYPE_FIELD_PREFIX):
                field_types[key[len(TYPE_FIELD_PREFIX):]] = value
            elif key.startswith(TAG_PREFIX):
                tags[key[len(TAG_PREFIX):]] = value
        return cls(fields=fields, field_types=field_types, tags=tags)


class Settings(BaseModel):
    """Everything read from the environment at startup."""

    influxdb: InfluxDbConfig
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    mappings: MappingConfig = Field(default_factory=MappingConfig)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            influxdb=InfluxDbConfig.from_env(env),
            service=ServiceConfig.from_env(env),
            mappings=MappingConfig.from_env(env),
        )


def _require(env: Mapping[str, str], name: str) -> str:
    value = env.get(name)
    if value is None:
        raise ConfigError(f"Missing required environment variable: {name}")
    return value


def _validate(model: type[_ModelT], values: dict[str, object]) -> _ModelT:
    try:
        return model.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid {model.__name__}: {exc}") from exc
