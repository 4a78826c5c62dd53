"""Command-line tools for festival_scout.

- ``python -m festival_scout.cli.crawl`` -- crawl a festival lineup from one
  or more URLs and print a summary or JSON.
"""
