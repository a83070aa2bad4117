#!/usr/bin/env python
"""Entry point for the ``isilon`` console script."""
import sys

from isilonpapi.cli import cli


def main():
    return cli(prog_name="isilon")


if __name__ == '__main__':
    sys.exit(main())
