"""Allow ``python -m ntask``."""

from ntask.cli import main

main()
