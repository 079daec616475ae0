import sys

from accelsearch.cli.accelsearch_cli import main

if __name__ == "__main__":
    sys.exit(main())
