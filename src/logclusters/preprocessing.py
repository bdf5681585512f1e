"""
Regex-based normalisation of raw log lines.

Rules are read from a text file, one per line:

    <pattern> :: <replacement>

Blank lines and lines starting with '#' are ignored, as is any line that does
not contain the separator exactly once. Rules run in file order and each one
replaces every occurrence before the next rule runs. Replacements use Python
template syntax, so groups are referenced as \\1 or \\g<name>.
"""

import re
from pathlib import Path

import structlog

from .exceptions import PatternError

logger = structlog.get_logger(__name__)

RULE_SEPARATOR = " :: "


def parse_rule(line: str) -> tuple[str, str] | None:
    """Split a rules-file line into (pattern, replacement), or None to skip it"""
    if line.startswith("#") or not line.strip():
        return None
    parts = line.split(RULE_SEPARATOR)
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


class LogPreprocessor:
    """Applies an ordered list of substitution rules to log messages"""

    def __init__(self, rules: list[tuple[str, str]] | None = None):
        self.rules: list[tuple[re.Pattern, str]] = []
        for pattern, replacement in rules or []:
            try:
                regex = re.compile(pattern)
            except re.error as e:
                raise PatternError(f"Invalid pattern {pattern!r}: {e}") from e
            try:
                # Templates are parsed on every sub call, match or not
                regex.sub(replacement, "")
            except (re.error, IndexError) as e:
                raise PatternError(f"Invalid replacement {replacement!r} for {pattern!r}: {e}") from e
            self.rules.append((regex, replacement))

    @classmethod
    def from_file(cls, path: str | Path) -> "LogPreprocessor":
        """Load rules from a patterns file

        Raises:
            OSError: If the file cannot be read
            PatternError: If a rule has an invalid regular expression
        """
        rules = []
        skipped = 0
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.rstrip("\r\n")
                rule = parse_rule(line)
                if rule is not None:
                    rules.append(rule)
                elif line.strip() and not line.startswith("#"):
                    skipped += 1

        logger.debug("Patterns loaded", path=str(path), rules=len(rules), skipped=skipped)
        return cls(rules)

    def preprocess(self, message: str) -> str:
        for regex, replacement in self.rules:
            message = regex.sub(replacement, message)
        return message

    def __len__(self) -> int:
        return len(self.rules)
