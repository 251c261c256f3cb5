from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from repo_tokenizer.config import DEFAULT_CONFIG_NAME, TokenizerConfig
from repo_tokenizer.errors import TokenizerError
from repo_tokenizer.runner import run_tokenization


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repo-tokenizer",
        description="Concatenate a project's text files into one file for AI context windows.",
    )
    parser.add_argument("project_root", nargs="?", default=None,
                        help="Project directory to scan (default: current directory)")
    parser.add_argument("output_path", nargs="?", default=None,
                        help="Output file (default: ./tokenized_project.txt)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    cwd = Path.cwd()
    cfg = TokenizerConfig.load(cwd / DEFAULT_CONFIG_NAME)
    level = logging.getLevelName(str(cfg.logging.level).upper())
    bad_level = not isinstance(level, int)
    logging.basicConfig(level=logging.INFO if bad_level else level, format=cfg.logging.format)
    log = logging.getLogger("RepoTokenizer")
    if bad_level:
        log.warning("Unknown logging level %r in config, using INFO", cfg.logging.level)

    project_root = Path(args.project_root) if args.project_root else cwd
    output_path = Path(args.output_path) if args.output_path else cwd / cfg.output.file_name

    try:
        run_tokenization(project_root, output_path, cfg)
    except TokenizerError as e:
        log.error("Error: %s", e)
        return 1

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
