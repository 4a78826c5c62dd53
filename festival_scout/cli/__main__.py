"""Allow ``python -m festival_scout.cli`` execution."""

from festival_scout.cli.crawl import main

main()
