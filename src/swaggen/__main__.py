"""Allow ``python -m swaggen``."""

from swaggen.app import main

main()
