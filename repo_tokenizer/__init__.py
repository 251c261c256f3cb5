"""Turn a source tree into one text file for pasting into an AI context window."""

from repo_tokenizer.errors import ConfigurationInputError, OutputWriteError, TokenizerError
from repo_tokenizer.runner import RunReport, run_tokenization

__version__ = "0.1.0"
