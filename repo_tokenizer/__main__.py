import sys

from repo_tokenizer.cli import main

sys.exit(main())
