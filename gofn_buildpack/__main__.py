import sys

from gofn_buildpack.cli import main

if __name__ == "__main__":
    sys.exit(main())
