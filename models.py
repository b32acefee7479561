"""Access log record — frozen dataclass + CSV line codec."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

FIELDS = ("Agent", "Time", "Method", "Resource", "Version", "Status")
DELIMITER = ","
HEADER = DELIMITER.join(FIELDS) + "\n"


class MalformedRecordError(ValueError):
    """Raised by strict parsing when a line does not carry all six columns."""


def sanitize_agent(value: Optional[str]) -> str:
    """Strip delimiters from a User-Agent. A missing header becomes ''."""
    if value is None:
        return ""
    return value.replace(DELIMITER, "")


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """Format *now* (default: current time) as 2024-01-01T00:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class LogEntry:
    agent: Optional[str]
    time: Optional[str]
    method: Optional[str]
    resource: Optional[str]
    version: Optional[str]
    status: Union[int, str, None]

    def to_line(self) -> str:
        values = (self.agent, self.time, self.method, self.resource, self.version, self.status)
        return DELIMITER.join("" if v is None else str(v) for v in values) + "\n"

    def to_dict(self) -> dict:
        return {
            "Agent": self.agent,
            "Time": self.time,
            "Method": self.method,
            "Resource": self.resource,
            "Version": self.version,
            "Status": self.status,
        }

    @classmethod
    def from_line(cls, line: str, strict: bool = False) -> "LogEntry":
        """Parse a record line positionally.

        Field *i* of the line maps to column *i*. Short lines leave the trailing
        fields as None and extra fields are ignored. The status becomes an int
        when it parses as one and is kept as text otherwise. With ``strict=True`` the
        line must carry exactly six fields and an integer status, otherwise
        MalformedRecordError is raised.
        """
        parts = line.rstrip("\r\n").split(DELIMITER)

        if strict:
            if len(parts) != len(FIELDS):
                raise MalformedRecordError(
                    f"expected {len(FIELDS)} fields, got {len(parts)}: {line!r}"
                )
            try:
                status = int(parts[5])
            except ValueError:
                raise MalformedRecordError(f"non-integer status: {parts[5]!r}") from None
            return cls(*parts[:5], status)

        parts += [None] * (len(FIELDS) - len(parts))
        status = parts[5]
        if status is not None:
            try:
                status = int(status)
            except ValueError:
                pass  # lenient: keep the raw text
        return cls(*parts[:5], status)
