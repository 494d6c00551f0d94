"""Entrypoint for `python -m indexnow`."""

from indexnow.cli import main

main()
