from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Sequence, Tuple

from apitrend.models import DEFAULT_FILE_PATTERNS, DEFAULT_SENSITIVE_KEYS

REDACTED = "***REDACTED***"


class RedactionError(RuntimeError):
    pass


_CAMEL = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# JSON string body, escapes included
_JSON_STR = r'(?:[^"\\\r\n]|\\.)*'

# Postman key/value entries, fields in either order
_FLAT_OBJECT = re.compile(r"\{[^{}\[\]]*\}")
_PAIR_KEY = re.compile(r'"key"\s*:\s*"(?P<name>' + _JSON_STR + r')"')
_PAIR_VALUE = re.compile(r'("value"\s*:\s*")(?P<value>' + _JSON_STR + r')(")')
# apikey auth keeps the secret under an entry literally named "value"
_APIKEY_BLOCK = re.compile(r'"apikey"\s*:\s*\[[^\[\]]*\]')
_JSON_MEMBER = re.compile(r'("(?P<name>' + _JSON_STR + r')"\s*:\s*")(?P<value>' + _JSON_STR + r')(")')
_HEADER_LINE = re.compile(r"(?m)^([ \t]*(?P<name>[A-Za-z][A-Za-z0-9_-]*)[ \t]*:[ \t]*)(?P<value>[^\r\n]+)")
# members inside JSON that was itself stringified, e.g. a logged response body
_ESCAPED_MEMBER = re.compile(r'(\\"(?P<name>[^"\\]*)\\"\s*:\s*\\")(?P<value>[^"\\]*)(\\")')
_URL_USERINFO = re.compile(r"(?i)(\b[a-z][a-z0-9+.-]*://[^/\s:@\"']+:)(?P<value>[^@\s/\"']+)(@)")
_ASSIGNMENT = re.compile(r"(\b(?P<name>[A-Za-z_][A-Za-z0-9_.-]*)[ \t]*=[ \t]*)(?P<value>[^\s&\"'<>,;]+)")
_AUTH_SCHEME = re.compile(r"(?i)(\b(?:bearer|basic)[ \t]+)(?P<value>[A-Za-z0-9\-._~+/]{6,}=*)")
_CLI_FLAG = re.compile(r"(--(?P<name>[A-Za-z][A-Za-z0-9_-]*)(?:[ \t]+|=))(?P<value>[^\s\"'-][^\s\"']*)")

_SHAPES: Tuple[re.Pattern, ...] = (
    re.compile(r"\beyJ[A-Za-z0-9_-]{5,}\.[A-Za-z0-9_-]{5,}\.[A-Za-z0-9_-]{5,}"),
    re.compile(r"\bPMAK-[A-Za-z0-9]{24}-[A-Za-z0-9]{34}\b"),
    re.compile(r"\bgh[pousr]_[A-Za-z0-9]{20,}\b"),
    re.compile(r"\bgithub_pat_[A-Za-z0-9_]{20,}\b"),
    re.compile(r"\bxox[abprs]-[A-Za-z0-9-]{10,}\b"),
    re.compile(r"\b(?:AKIA|ASIA)[A-Z0-9]{16}\b"),
)
_LONG_KEY = re.compile(r"\b[A-Za-z0-9]{32,}\b")
_SEGMENT = re.compile(r"[A-Z]?[a-z]+|[A-Z]+(?![a-z])|[0-9]+")


def normalize_key(name: str) -> str:
    return _NON_ALNUM.sub("_", _CAMEL.sub(r"\1_\2", name).lower()).strip("_")


@dataclass
class RedactionReport:
    files_scanned: int = 0
    files_changed: List[Path] = field(default_factory=list)
    replacements: int = 0


class Redactor:
    """
    Textual secret scrubber for run artifacts.

    Key rule: a key is sensitive when its normalized name equals a sensitive
    term or ends with "_<term>". So "access_token" and "X-Api-Key" match,
    "token_count" does not. Only quoted string values are replaced.
    Shape rules catch bearer tokens, signed tokens and known key formats
    regardless of where they appear.
    """

    def __init__(
        self,
        marker: str = REDACTED,
        sensitive_keys: Iterable[str] = DEFAULT_SENSITIVE_KEYS,
        file_patterns: Sequence[str] = DEFAULT_FILE_PATTERNS,
    ):
        self._marker = marker
        self._terms = frozenset(normalize_key(k) for k in sensitive_keys if normalize_key(k))
        self._file_patterns = tuple(file_patterns)
        if not marker or self.redact(marker) != marker or self.is_sensitive_key(marker):
            raise ValueError(f"Redaction marker {marker!r} would itself be redacted.")

    @classmethod
    def from_settings(cls, settings) -> "Redactor":
        return cls(
            marker=settings.marker,
            sensitive_keys=settings.sensitive_keys,
            file_patterns=settings.file_patterns,
        )

    @property
    def marker(self) -> str:
        return self._marker

    def is_sensitive_key(self, name: str) -> bool:
        norm = normalize_key(name)
        if not norm:
            return False
        if norm in self._terms:
            return True
        return any(norm.endswith("_" + t) for t in self._terms)

    def redact(self, content: str) -> str:
        return self._redact_counted(content)[0]

    def _redact_counted(self, content: str) -> Tuple[str, int]:
        count = 0

        def swap(m: re.Match) -> str:
            nonlocal count
            count += 1
            whole, base = m.group(0), m.start()
            return whole[: m.start("value") - base] + self._marker + whole[m.end("value") - base:]

        def keyed(m: re.Match) -> str:
            value = m.group("value")
            if not value or self._marker in value or not self.is_sensitive_key(m.group("name")):
                return m.group(0)
            return swap(m)

        def always(m: re.Match) -> str:
            if self._marker in m.group("value"):
                return m.group(0)
            return swap(m)

        def scheme(m: re.Match) -> str:
            # skip prose such as "basic authentication"
            if not _looks_like_credential(m.group("value")) and len(m.group("value")) < 20:
                return m.group(0)
            return swap(m)

        def shape(m: re.Match) -> str:
            nonlocal count
            count += 1
            return self._marker

        def long_key(m: re.Match) -> str:
            if not _looks_random(m.group(0)):
                return m.group(0)
            return shape(m)

        def entry(sensitive: Callable[[str], bool]) -> Callable[[re.Match], str]:
            def fn(m: re.Match) -> str:
                obj = m.group(0)
                key = _PAIR_KEY.search(obj)
                if key is None or not sensitive(key.group("name")):
                    return obj
                return _PAIR_VALUE.sub(filled, obj)

            return fn

        def filled(m: re.Match) -> str:
            if not m.group("value"):
                return m.group(0)
            return always(m)

        def apikey_block(m: re.Match) -> str:
            return _FLAT_OBJECT.sub(entry(lambda name: name == "value"), m.group(0))

        steps: List[Tuple[re.Pattern, Callable[[re.Match], str]]] = [
            (_APIKEY_BLOCK, apikey_block),
            (_FLAT_OBJECT, entry(self.is_sensitive_key)),
            (_JSON_MEMBER, keyed),
            (_ESCAPED_MEMBER, keyed),
            (_HEADER_LINE, keyed),
            (_URL_USERINFO, always),
            (_ASSIGNMENT, keyed),
            (_CLI_FLAG, keyed),
            (_AUTH_SCHEME, scheme),
        ]
        steps.extend((p, shape) for p in _SHAPES)
        steps.append((_LONG_KEY, long_key))

        for pattern, fn in steps:
            content = pattern.sub(fn, content)
        return content, count

    def matches_file(self, path: Path) -> bool:
        return any(fnmatch.fnmatch(path.name, pat) for pat in self._file_patterns)

    def redact_file(self, path: Path) -> int:
        try:
            raw = path.read_bytes()
            text = raw.decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise RedactionError(f"Cannot redact {path}: {e}") from e

        redacted, count = self._redact_counted(text)
        if redacted != text:
            try:
                path.write_bytes(redacted.encode("utf-8"))
            except OSError as e:
                raise RedactionError(f"Cannot write redacted {path}: {e}") from e
        return count

    def redact_tree(self, root: Path) -> RedactionReport:
        report = RedactionReport()
        if not root.exists():
            return report
        for path in sorted(root.rglob("*")):
            if not path.is_file() or not self.matches_file(path):
                continue
            report.files_scanned += 1
            n = self.redact_file(path)
            if n:
                report.files_changed.append(path)
                report.replacements += n
        return report


def _looks_like_credential(value: str) -> bool:
    return bool(re.search(r"[0-9]", value) or re.search(r"[A-Z].*[a-z]|[a-z].*[A-Z]", value[1:]))


def _looks_random(token: str) -> bool:
    """
    Generated keys split into many one or two character case/digit segments;
    CamelCase names split into whole words.
    """
    if not (re.search(r"[0-9]", token) and re.search(r"[a-z]", token) and re.search(r"[A-Z]", token)):
        return False
    segments = _SEGMENT.findall(token)
    return len(token) < 3 * len(segments)

