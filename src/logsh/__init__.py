"""logsh: command-line client for the logship log analytics service.

The package manages named connections to logship servers and keeps their
credentials valid:

- ``logsh.config``: persisted connection set
- ``logsh.auth``: password exchange and OAuth device flow
- ``logsh.connect``: add, log in, inspect and remove connections

Examples:
    >>> import logsh
    >>> logsh.__version__
    '0.1.0'
"""

from logsh.meta import __app_name__, __version__

__all__ = [
    "__app_name__",
    "__version__",
]
