"""anycli: expose any command-line program as a catalog of callable tools."""

__version__ = "0.1.0"
