"""Tree rows, skins and path checks for disk space views, and the buildit coverage, benchmark and version tasks."""

__version__ = "1.1.6"