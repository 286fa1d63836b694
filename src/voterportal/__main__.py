"""Allow ``python -m voterportal`` and back the ``voterportal`` script."""

import sys

from voterportal.cli import cli_main


def main() -> int:
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
