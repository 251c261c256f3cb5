from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

log = logging.getLogger("RepoTokenizer.Gitignore")

# Compiled for patterns that can never match a real path (e.g. a bare "/").
_NEVER = re.compile(r"(?!)")


def normalize_path(path: str | Path) -> str:
    """Forward-slash form of a relative path, as the rules expect it."""
    return str(path).replace("\\", "/")


def strip_comment(line: str) -> str:
    """Drop everything from the first unescaped '#' and trim whitespace.

    Backslash escapes are kept so that the glob translation can turn
    ``\\#`` into a literal '#'.
    """
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "#":
            line = line[:i]
            break
        i += 1
    return line.strip()


def translate_glob(pattern: str) -> str:
    """Turn one gitignore glob (no '!' prefix) into a regex source string.

    ``**/`` spans zero or more directories, any other ``**`` spans anything,
    ``*`` and ``?`` stay inside one path segment. A leading '/' anchors to
    the start of the path, a trailing '/' to its end; otherwise the match
    has to sit on segment boundaries.
    """
    anchored = pattern.startswith("/")
    body = pattern[1:] if anchored else pattern
    end_anchored = body.endswith("/")
    body = body.rstrip("/")
    if not body:
        return _NEVER.pattern

    parts: List[str] = []
    i, n = 0, len(body)
    while i < n:
        ch = body[i]
        if ch == "\\" and i + 1 < n:
            parts.append(re.escape(body[i + 1]))
            i += 2
        elif body.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif body.startswith("**", i):
            parts.append(".*")
            i += 2
        elif ch == "*":
            parts.append("[^/]*")
            i += 1
        elif ch == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(ch))
            i += 1

    prefix = "^" if anchored else "(?:^|/)"
    suffix = "$" if end_anchored else "(?=/|$)"
    return prefix + "".join(parts) + suffix


@dataclass(frozen=True)
class PatternRule:
    source: str
    regex: re.Pattern
    negated: bool = False

    def matches(self, path: str | Path) -> bool:
        return self.regex.search(normalize_path(path)) is not None


def compile_pattern(line: str) -> Optional[PatternRule]:
    """Compile one raw .gitignore line. Blank and comment-only lines give None."""
    source = strip_comment(line)
    if not source:
        return None

    negated = source.startswith("!")
    pattern = source[1:] if negated else source
    try:
        regex = re.compile(translate_glob(pattern))
    except re.error as e:
        log.debug("Pattern %r does not compile (%s); it will never match", source, e)
        regex = _NEVER
    return PatternRule(source=source, regex=regex, negated=negated)


class GitignoreMatcher:
    """Ordered rule list; the last rule that matches a path decides."""

    def __init__(self, rules: Iterable[PatternRule]):
        self.rules: List[PatternRule] = list(rules)

    def __len__(self) -> int:
        return len(self.rules)

    def last_match(self, path: str | Path) -> Optional[PatternRule]:
        normalized = normalize_path(path)
        found = None
        for rule in self.rules:
            if rule.matches(normalized):
                found = rule
        return found

    def accepts(self, path: str | Path) -> bool:
        rule = self.last_match(path)
        return rule is None or rule.negated


class AcceptAll(GitignoreMatcher):
    """Stand-in used when there is no .gitignore to read."""

    def __init__(self):
        super().__init__(())

    def accepts(self, path: str | Path) -> bool:
        return True


def parse_gitignore(content: str) -> GitignoreMatcher:
    rules = [rule for rule in map(compile_pattern, content.splitlines()) if rule is not None]
    return GitignoreMatcher(rules)


def load_gitignore(root: str | Path, name: str = ".gitignore") -> GitignoreMatcher:
    """Load the single ignore file directly under ``root``.

    A missing or unreadable file is not an error: the run goes on with the
    built-in exclusions only.
    """
    path = Path(root) / name
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        log.info("No %s found or error reading it (%s), will include all files", name, e)
        return AcceptAll()

    matcher = parse_gitignore(content)
    log.info("Loaded %d rules from %s", len(matcher), path)
    return matcher
