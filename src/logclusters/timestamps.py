"""
Best-effort timestamps for syslog-style lines.

Only the classic "Mon DD HH:MM:SS" prefix is understood, and it is placed in
the current year. Anything else, including lines from a previous year that do
not form a valid date in this one, is treated as happening now.
"""

from datetime import datetime

SYSLOG_FORMAT = "%b %d %H:%M:%S %Y"


def parse_log_timestamp(line: str, now: datetime | None = None) -> datetime:
    now = now or datetime.now()
    prefix = " ".join(line.split()[:3])
    try:
        return datetime.strptime(f"{prefix} {now.year}", SYSLOG_FORMAT)
    except ValueError:
        return now
