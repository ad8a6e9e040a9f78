"""Exceptions raised by the I/O layers.

They derive from ``click.ClickException`` so the CLI reports them as a
one-line ``Error: ...`` and exits with status 1.
"""

import click


class GitLogError(click.ClickException):
    """git is missing, the path is not a repository, or ``git log`` failed."""


class AnalysisFileError(click.ClickException):
    """An analysis JSON file could not be read or parsed."""


class KimaiError(click.ClickException):
    """Authentication or a request against the Kimai API failed."""
