"""
Data models for structured log records.
"""

from k8s_log_viewer.models.log_record import (
    EnvInfo,
    Geo,
    LevelMeta,
    LevelMetaRequest,
    LevelMetaUser,
    LogRecord,
    Metadata,
)

__all__ = [
    "EnvInfo",
    "Geo",
    "LevelMeta",
    "LevelMetaRequest",
    "LevelMetaUser",
    "LogRecord",
    "Metadata",
]
