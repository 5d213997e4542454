"""Influx Sink package."""

from .config import MappingConfig, Settings
from .mapping.paths import ExpectedType, Mappings, PathMapping, compile_mappings
from .pipeline import EventProcessor, EventSink

__all__ = [
    "EventProcessor",
    "EventSink",
    "ExpectedType",
    "MappingConfig",
    "Mappings",
    "PathMapping",
    "Settings",
    "compile_mappings",
]
