"""Console output helpers."""

import click


def log(message: str, verbose: bool = True, level: str = "INFO"):
    """Log message if verbose or if error."""
    if verbose or level == "ERROR":
        click.echo(f"[{level}] {message}", err=(level == "ERROR"))


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
