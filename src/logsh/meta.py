"""Package metadata for logsh."""

from __future__ import annotations

__app_name__ = "logsh"
__version__ = "0.1.0"
__author__ = "logship"
__description__ = "Command-line client for the logship analytics service"

__all__ = [
    "__app_name__",
    "__author__",
    "__description__",
    "__version__",
]
