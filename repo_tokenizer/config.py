from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Type, TypeVar

import yaml

from repo_tokenizer.ignore_policy import MAX_FILE_SIZE

log = logging.getLogger("RepoTokenizer.Config")

DEFAULT_CONFIG_NAME = "repo_tokenizer.yaml"

T = TypeVar("T")


@dataclass
class WalkConfig:
    # False keeps whatever order os.scandir returns
    sort_entries: bool = False
    max_file_size: int = MAX_FILE_SIZE
    encoding: str = "utf-8"
    gitignore_name: str = ".gitignore"
    extra_ignored_dirs: List[str] = field(default_factory=list)
    extra_ignored_files: List[str] = field(default_factory=list)
    extra_binary_extensions: List[str] = field(default_factory=list)


@dataclass
class OutputConfig:
    file_name: str = "tokenized_project.txt"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(name)s - %(levelname)s - %(message)s"


@dataclass
class TokenizerConfig:
    walk: WalkConfig = field(default_factory=WalkConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @staticmethod
    def load(path: str | Path) -> "TokenizerConfig":
        p = Path(path)
        if not p.exists():
            return TokenizerConfig()

        try:
            data: Dict[str, Any] = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            log.warning("Could not read config %s (%s), using defaults", p, e)
            return TokenizerConfig()

        if not isinstance(data, dict):
            log.warning("Config %s is not a mapping, using defaults", p)
            return TokenizerConfig()

        # Merge with defaults
        return TokenizerConfig(
            walk=_merge(WalkConfig, data.get("walk"), "walk"),
            output=_merge(OutputConfig, data.get("output"), "output"),
            logging=_merge(LoggingConfig, data.get("logging"), "logging"),
        )


def _merge(cls: Type[T], raw: Any, section: str) -> T:
    """Overlay one YAML section on the dataclass defaults, dropping unknown keys."""
    if not raw:
        return cls()
    if not isinstance(raw, dict):
        log.warning("Config section %r is not a mapping, using defaults", section)
        return cls()
    known = {f.name for f in fields(cls)}
    unknown = sorted(str(k) for k in raw if k not in known)
    if unknown:
        log.warning("Ignoring unknown keys in config section %r: %s", section, ", ".join(unknown))
    return cls(**{**cls().__dict__, **{k: v for k, v in raw.items() if k in known}})
