"""Entry point for launching the SegBot communicator from a checkout."""

import sys
from segbot.main import main


if __name__ == "__main__":
    sys.exit(main())
