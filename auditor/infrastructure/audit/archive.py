"""Archive file naming: <fileName>_<ISO timestamp with ':' -> '-'>.log"""

from datetime import datetime, timezone
from typing import Optional

from auditor.core.exceptions import ArchiveParseError
from auditor.core.models import get_timestamp

ARCHIVE_SUFFIX = ".log"


def sanitize_timestamp(timestamp: str) -> str:
    """Filesystem-safe form of an ISO timestamp (':' -> '-')"""
    return timestamp.replace(":", "-")


def restore_timestamp(safe: str) -> datetime:
    """Inverse of sanitize_timestamp, returned as an aware UTC datetime"""
    date_part, sep, time_part = safe.partition("T")
    if not sep or not time_part:
        raise ArchiveParseError(safe, "missing time component")

    iso = f"{date_part}T{time_part.replace('-', ':')}"
    if iso.endswith("Z"):
        iso = iso[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(iso)
    except ValueError as e:
        raise ArchiveParseError(safe, str(e))

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def archive_name(file_name: str, timestamp: Optional[str] = None) -> str:
    return f"{file_name}_{sanitize_timestamp(timestamp or get_timestamp())}{ARCHIVE_SUFFIX}"


def archive_timestamp_segment(archive_file: str) -> Optional[str]:
    """Trailing '_' segment of an archive name without the suffix, None if absent"""
    _, sep, segment = archive_file.rpartition("_")
    if not sep:
        return None
    if segment.endswith(ARCHIVE_SUFFIX):
        segment = segment[: -len(ARCHIVE_SUFFIX)]
    return segment or None
