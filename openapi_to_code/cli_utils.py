"""
Reconstruction of the command line that produced a generated file.
"""

from enum import Enum
from pathlib import Path

import click

COMMAND_NAME = "openapi_to_code"


def _display_value(value) -> str:
    """Existing files are shown by file name only; enum choices by their value."""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (str, Path)):
        candidate = Path(str(value))
        return candidate.name if candidate.exists() else str(value)
    return str(value)


def _option_tokens(option: click.Option, value) -> list[str]:
    if value == option.default:
        return []
    flag = option.opts[0] if option.opts else f"--{option.name}"
    return [flag] if option.is_flag else [flag, _display_value(value)]


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Rebuild the invocation of a command from the active Click context.

    Positional arguments come first, then the options that differ from
    their defaults, both in declaration order. Outside of a Click context
    only the command name is returned.

    Args:
        click_command: Click command whose parameters are listed

    Returns:
        Reconstructed command line string
    """
    ctx = click.get_current_context(silent=True)
    if ctx is None or not ctx.params:
        return COMMAND_NAME

    positional: list[str] = []
    flags: list[str] = []
    for param in click_command.params:
        value = ctx.params.get(param.name)
        if value is None or value is False:
            continue
        if isinstance(param, click.Argument):
            positional.append(_display_value(value))
        elif isinstance(param, click.Option):
            flags.extend(_option_tokens(param, value))

    return " ".join([COMMAND_NAME, *positional, *flags])
