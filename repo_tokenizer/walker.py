from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Set, Union

from repo_tokenizer.errors import ConfigurationInputError
from repo_tokenizer.ignore_policy import IgnorePolicy, SkipReason, WalkEntry

log = logging.getLogger("RepoTokenizer.Walker")

_SKIP_MESSAGES = {
    SkipReason.GITIGNORE: "Skipping ignored path: %s",
    SkipReason.IGNORED_DIRECTORY: "Skipping common ignored directory: %s",
    SkipReason.IGNORED_FILENAME: "Skipping ignored file name: %s",
    SkipReason.BINARY_EXTENSION: "Skipping binary or large file: %s",
    SkipReason.TOO_LARGE: "Skipping binary or large file: %s",
    SkipReason.OUTPUT_FILE: "Skipping output file: %s",
    SkipReason.NOT_REGULAR: "Skipping non-regular entry: %s",
    SkipReason.SYMLINK_LOOP: "Skipping symlink back into its own ancestor: %s",
}


@dataclass(frozen=True)
class FileRecord:
    relative_path: str
    content: str


@dataclass(frozen=True)
class SkippedEntry:
    relative_path: str
    reason: SkipReason
    is_dir: bool = False
    detail: str = ""


WalkResult = Union[FileRecord, SkippedEntry]


def _relative(root: Path, path: Path) -> str:
    return path.relative_to(root).as_posix()


def walk(
    root: str | Path,
    policy: IgnorePolicy,
    *,
    sort_entries: bool = False,
    encoding: str = "utf-8",
) -> Iterator[WalkResult]:
    """Depth-first walk yielding one result per visited entry, in order.

    Entries come in directory-listing order unless ``sort_entries`` is set.
    Files that cannot be read are yielded as ``SkippedEntry`` with
    ``READ_ERROR`` and the walk carries on.
    """
    root = Path(root)
    if not root.exists():
        raise ConfigurationInputError(root, "path does not exist")
    if not root.is_dir():
        raise ConfigurationInputError(root, "not a directory")

    ancestors: Set[str] = {os.path.realpath(root)}
    yield from _walk_dir(root, root, policy, ancestors, sort_entries, encoding)


def _walk_dir(
    root: Path,
    current: Path,
    policy: IgnorePolicy,
    ancestors: Set[str],
    sort_entries: bool,
    encoding: str,
) -> Iterator[WalkResult]:
    try:
        with os.scandir(current) as it:
            names = [e.name for e in it]
    except OSError as e:
        if current == root:
            raise ConfigurationInputError(root, str(e)) from e
        rel = _relative(root, current)
        log.warning("Error listing directory %s: %s", rel, e)
        yield SkippedEntry(rel, SkipReason.READ_ERROR, is_dir=True, detail=str(e))
        return

    if sort_entries:
        names.sort()

    for name in names:
        path = current / name
        rel = _relative(root, path)

        try:
            rel.encode("utf-8")
        except UnicodeEncodeError as e:
            log.warning("Skipping path that is not valid UTF-8: %r", rel)
            yield SkippedEntry(rel, SkipReason.READ_ERROR, detail=str(e))
            continue

        try:
            st = os.stat(path)
        except OSError as e:
            log.warning("Error reading %s: %s", rel, e)
            yield SkippedEntry(rel, SkipReason.READ_ERROR, detail=str(e))
            continue

        is_dir = stat.S_ISDIR(st.st_mode)
        if not is_dir and not stat.S_ISREG(st.st_mode):
            log.info(_SKIP_MESSAGES[SkipReason.NOT_REGULAR], rel)
            yield SkippedEntry(rel, SkipReason.NOT_REGULAR)
            continue

        entry = WalkEntry(path=path, is_dir=is_dir, size=0 if is_dir else st.st_size)
        reason = policy.check(rel, entry)
        if reason is not None:
            log.info(_SKIP_MESSAGES[reason], rel)
            yield SkippedEntry(rel, reason, is_dir=is_dir)
            continue

        if is_dir:
            real = os.path.realpath(path)
            if real in ancestors:
                log.info(_SKIP_MESSAGES[SkipReason.SYMLINK_LOOP], rel)
                yield SkippedEntry(rel, SkipReason.SYMLINK_LOOP, is_dir=True)
                continue
            ancestors.add(real)
            try:
                yield from _walk_dir(root, path, policy, ancestors, sort_entries, encoding)
            finally:
                ancestors.discard(real)
            continue

        try:
            with open(path, "r", encoding=encoding, newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            log.warning("Error processing file %s: %s", rel, e)
            yield SkippedEntry(rel, SkipReason.READ_ERROR, detail=str(e))
            continue

        log.info("Processed: %s", rel)
        yield FileRecord(rel, content)
