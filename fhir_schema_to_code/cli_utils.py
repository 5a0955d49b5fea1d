"""
CLI utilities for command line reconstruction and logging setup.
"""

import logging
from pathlib import Path

import click

PROGRAM_NAME = "fhir_schema_to_code"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct command line from current Click context using introspection.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    # Try to get current Click context for parameter values
    try:
        ctx = click.get_current_context()
        cli_args = ctx.params
    except RuntimeError:
        # No active context, return basic command
        return PROGRAM_NAME

    cmd_parts = [PROGRAM_NAME, click_command.name] if click_command.name else [PROGRAM_NAME]
    if not cli_args:
        return " ".join(cmd_parts)

    arguments = []  # For positional arguments
    options = []  # For optional arguments

    for param in click_command.params:
        param_name = param.name
        if param_name not in cli_args:
            continue

        value = cli_args[param_name]
        if not value:
            continue

        if isinstance(param, click.Argument):
            values = value if isinstance(value, tuple) else (value,)
            arguments.extend(_format_value(v) for v in values)

        elif isinstance(param, click.Option):
            # Skip if it's the default value
            if hasattr(param, "default") and value == param.default:
                continue

            # Get the primary option name (first in opts list)
            flag = param.opts[0] if param.opts else f"--{param_name}"
            if param.is_flag:
                options.append(flag)
            else:
                options.extend([flag, _format_value(value)])

    # Combine: command + arguments + options
    cmd_parts.extend(arguments)
    cmd_parts.extend(options)

    return " ".join(cmd_parts)


def _format_value(value) -> str:
    """Convert file paths to just filenames for cleaner display."""
    if isinstance(value, (str, Path)):
        path_obj = Path(str(value))
        return path_obj.name if path_obj.exists() else str(value)
    return str(value)


def configure_logging(verbose: int = 0, quiet: bool = False) -> None:
    """Configure root logging from the -v/--quiet flags."""
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)
