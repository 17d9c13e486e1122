"""
LinkChecker package initializer.
Defines package version and exposes the engine and CLI.
"""
__version__ = "0.1.0"

from link_checker.engine import Engine  # noqa: E402
from link_checker.cli import cli  # noqa: E402

__all__ = ["__version__", "Engine", "cli"]
