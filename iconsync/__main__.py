"""Entry points for `python -m iconsync` and `iconsyncd`."""

import sys


def main():
    from iconsync.app import run_sync
    sys.exit(run_sync())


def daemon_main():
    from iconsync.app import run_daemon
    sys.exit(run_daemon())


if __name__ == "__main__":
    main()
