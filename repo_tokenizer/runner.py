from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from repo_tokenizer.aggregator import OutputBuffer
from repo_tokenizer.config import TokenizerConfig
from repo_tokenizer.errors import ConfigurationInputError
from repo_tokenizer.gitignore import GitignoreMatcher, load_gitignore
from repo_tokenizer.ignore_policy import IgnorePolicy
from repo_tokenizer.walker import FileRecord, SkippedEntry, walk


class RunState(str, Enum):
    IDLE = "idle"
    LOADING_IGNORE_RULES = "loading_ignore_rules"
    WALKING = "walking"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunReport:
    project_root: Path
    output_path: Path
    included: List[str] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)
    bytes_written: int = 0


class TokenizationRun:
    """One pass over a project tree, from loading ignore rules to the final write."""

    def __init__(self, project_root: str | Path, output_path: str | Path, cfg: TokenizerConfig | None = None):
        self.project_root = Path(project_root)
        self.output_path = Path(output_path)
        self.cfg = cfg or TokenizerConfig()
        self.state = RunState.IDLE
        self.log = logging.getLogger("RepoTokenizer.Run")
        self.matcher: Optional[GitignoreMatcher] = None

    def _build_policy(self) -> IgnorePolicy:
        w = self.cfg.walk
        return IgnorePolicy(
            matcher=self.matcher,
            output_path=self.output_path,
            max_file_size=w.max_file_size,
            extra_dirs=w.extra_ignored_dirs,
            extra_files=w.extra_ignored_files,
            extra_binary_extensions=w.extra_binary_extensions,
        )

    def run(self) -> RunReport:
        if self.state != RunState.IDLE:
            raise RuntimeError(f"Run already used (state: {self.state.value})")

        self.log.info("Starting to parse project at %s", self.project_root)
        report = RunReport(project_root=self.project_root, output_path=self.output_path)
        try:
            if not self.project_root.is_dir():
                reason = "not a directory" if self.project_root.exists() else "path does not exist"
                raise ConfigurationInputError(self.project_root, reason)

            self.state = RunState.LOADING_IGNORE_RULES
            self.matcher = load_gitignore(self.project_root, self.cfg.walk.gitignore_name)
            policy = self._build_policy()

            self.state = RunState.WALKING
            buffer = OutputBuffer()
            for result in walk(
                self.project_root,
                policy,
                sort_entries=self.cfg.walk.sort_entries,
                encoding=self.cfg.walk.encoding,
            ):
                if isinstance(result, FileRecord):
                    buffer.add(result)
                    report.included.append(result.relative_path)
                else:
                    report.skipped.append(result)

            self.state = RunState.FINALIZING
            report.bytes_written = buffer.finalize(self.output_path)
        except Exception as e:
            self.log.error("Run failed while %s: %s", self.state.value, e)
            self.state = RunState.FAILED
            raise

        self.state = RunState.DONE
        self.log.info("Project successfully parsed and written to %s", self.output_path)
        return report


def run_tokenization(
    project_root: str | Path,
    output_path: str | Path,
    cfg: TokenizerConfig | None = None,
) -> RunReport:
    return TokenizationRun(project_root, output_path, cfg).run()
