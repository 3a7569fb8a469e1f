"""Run StorySpark with ``python -m storyspark``."""

from .StorySpark import cli_entry

cli_entry()
