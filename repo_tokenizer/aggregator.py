from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import List

from repo_tokenizer.errors import OutputWriteError
from repo_tokenizer.walker import FileRecord

log = logging.getLogger("RepoTokenizer.Output")

SEPARATOR = "=" * 80


def format_header(relative_path: str) -> str:
    return f"{SEPARATOR}\n// FILE: {relative_path}\n{SEPARATOR}"


def format_record(relative_path: str, content: str) -> str:
    return f"{format_header(relative_path)}\n{content}\n\n"


class OutputBuffer:
    """In-memory accumulator for the whole artifact.

    Nothing touches the disk until ``finalize``, which writes the text in a
    single replace so readers never see a half-written file.
    """

    def __init__(self):
        self._chunks: List[str] = []
        self.paths: List[str] = []

    def __len__(self) -> int:
        return len(self.paths)

    def add(self, record: FileRecord) -> None:
        self._chunks.append(format_record(record.relative_path, record.content))
        self.paths.append(record.relative_path)

    def render(self) -> str:
        return "".join(self._chunks)

    def finalize(self, output_path: str | Path, encoding: str = "utf-8") -> int:
        """Write the buffer to ``output_path``, overwriting it. Returns bytes written."""
        # Write through a symlinked output path to its target.
        target = Path(os.path.realpath(output_path))
        data = self.render().encode(encoding)
        tmp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            # mkstemp creates 0600 files; keep the usual mode for the artifact.
            os.chmod(tmp_name, target.stat().st_mode & 0o777 if target.exists() else 0o644)
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise OutputWriteError(target, str(e)) from e

        log.info("Wrote %d files (%d bytes) to %s", len(self), len(data), target)
        return len(data)
