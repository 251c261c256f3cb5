from __future__ import annotations

from pathlib import Path


class TokenizerError(Exception):
    """Base class for errors that abort a tokenization run."""


class ConfigurationInputError(TokenizerError):
    """The project root does not exist or is not a directory."""

    def __init__(self, root: str | Path, reason: str):
        self.root = Path(root)
        self.reason = reason
        super().__init__(f"Invalid project root {self.root}: {reason}")


class OutputWriteError(TokenizerError):
    """The output artifact could not be written."""

    def __init__(self, output_path: str | Path, reason: str):
        self.output_path = Path(output_path)
        self.reason = reason
        super().__init__(f"Could not write output file {self.output_path}: {reason}")
