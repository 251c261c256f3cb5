from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from repo_tokenizer.gitignore import AcceptAll, GitignoreMatcher

log = logging.getLogger("RepoTokenizer.Policy")

MAX_FILE_SIZE = 1024 * 1024

# Never descended into, wherever they appear in the tree.
IGNORED_DIRECTORIES = frozenset({
    "node_modules", ".git", ".idea", ".vscode", "dist", "build",
    ".svn", ".hg", "__pycache__",
})

IGNORED_FILENAMES = frozenset({
    # lockfiles
    "package-lock.json", "yarn.lock", "pnpm-lock.yaml", "bun.lockb",
    "poetry.lock", "Pipfile.lock", "Cargo.lock", "composer.lock", "Gemfile.lock",
    # OS metadata
    ".DS_Store", "Thumbs.db", "desktop.ini",
    # secrets
    ".env", ".env.local", ".env.development.local", ".env.test.local", ".env.production.local",
})

BINARY_EXTENSIONS = frozenset({
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".ico", ".svg",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".zip", ".rar", ".tar", ".gz", ".7z",
    ".exe", ".dll", ".so", ".dylib",
    ".mp3", ".mp4", ".avi", ".mov", ".flv",
    ".ttf", ".otf", ".woff", ".woff2",
    ".pyc", ".class",
})


class SkipReason(str, Enum):
    GITIGNORE = "gitignore"
    IGNORED_DIRECTORY = "ignored_directory"
    IGNORED_FILENAME = "ignored_filename"
    BINARY_EXTENSION = "binary_extension"
    TOO_LARGE = "too_large"
    OUTPUT_FILE = "output_file"
    READ_ERROR = "read_error"
    NOT_REGULAR = "not_regular"
    SYMLINK_LOOP = "symlink_loop"


@dataclass(frozen=True)
class WalkEntry:
    path: Path
    is_dir: bool
    size: int = 0

    @property
    def name(self) -> str:
        return self.path.name


def is_binary_path(path: str | Path, extensions: Iterable[str] = BINARY_EXTENSIONS) -> bool:
    return Path(path).suffix.lower() in extensions


class IgnorePolicy:
    """Combines .gitignore rules with the built-in exclusions.

    ``check`` returns the reason an entry is left out, or None when it is
    kept. A rejected directory is never descended into.
    """

    def __init__(
        self,
        matcher: GitignoreMatcher | None = None,
        output_path: str | Path | None = None,
        max_file_size: int = MAX_FILE_SIZE,
        extra_dirs: Iterable[str] = (),
        extra_files: Iterable[str] = (),
        extra_binary_extensions: Iterable[str] = (),
    ):
        self.matcher = matcher if matcher is not None else AcceptAll()
        self.output_path = Path(os.path.realpath(output_path)) if output_path is not None else None
        self.max_file_size = int(max_file_size)
        self.ignored_dirs = IGNORED_DIRECTORIES | set(extra_dirs)
        self.ignored_files = IGNORED_FILENAMES | set(extra_files)
        self.binary_extensions = BINARY_EXTENSIONS | {e.lower() for e in extra_binary_extensions}

    def check(self, relative_path: str, entry: WalkEntry) -> Optional[SkipReason]:
        if not self.matcher.accepts(relative_path):
            return SkipReason.GITIGNORE

        if entry.is_dir:
            if entry.name in self.ignored_dirs:
                return SkipReason.IGNORED_DIRECTORY
            return None

        if entry.name in self.ignored_files:
            return SkipReason.IGNORED_FILENAME
        if is_binary_path(entry.path, self.binary_extensions):
            return SkipReason.BINARY_EXTENSION
        if entry.size > self.max_file_size:
            return SkipReason.TOO_LARGE
        if self.output_path is not None and Path(os.path.realpath(entry.path)) == self.output_path:
            return SkipReason.OUTPUT_FILE
        return None

    def should_include(self, relative_path: str, entry: WalkEntry) -> bool:
        return self.check(relative_path, entry) is None
