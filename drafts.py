import sys

from drafts_lib.cli import main

if __name__ == "__main__":
    sys.exit(main())
