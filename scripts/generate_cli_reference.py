#!/usr/bin/env python3
"""Generate CLI reference documentation from the typer app."""

import sys
from pathlib import Path

# Add parent directory to path to import finmaster
sys.path.insert(0, str(Path(__file__).parent.parent))

from typing import Any

import typer

from finmaster.cli import app


def is_argument(param: Any) -> bool:
    """Check whether a command parameter is positional."""
    return getattr(param, "param_type_name", None) == "argument"


def format_param(param: Any) -> str:
    """Format an argument or option with its flags and help text."""
    if is_argument(param):
        return f"- `{param.human_readable_name}` (required)"

    flags = list(getattr(param, "opts", [])) + list(getattr(param, "secondary_opts", []))
    if not flags:
        # Fallback: construct from parameter name
        flags = [f"--{param.name.replace('_', '-')}"]
    flag_str = ", ".join(f"`{flag}`" for flag in flags)
    parts = [f"- {flag_str}"]

    help_text = getattr(param, "help", None)
    if help_text:
        parts.append(f": {help_text}")

    default = getattr(param, "default", None)
    if default is not None and default is not False:
        parts.append(f" (default: {default})")

    return "".join(parts)


def generate_command_doc(path: str, command: Any) -> str:
    """Generate documentation for a single leaf command."""
    doc = (command.help or "No description available.").strip()

    lines = [
        f"### {path}",
        "",
        doc,
        "",
        "**Usage:**",
        "",
        "```bash",
        f"finmaster {path}",
        "```",
        "",
    ]

    arguments = [p for p in command.params if is_argument(p)]
    options = [p for p in command.params if not is_argument(p) and p.name != "help"]

    if arguments:
        lines.append("**Arguments:**")
        lines.append("")
        lines.extend(format_param(p) for p in arguments)
        lines.append("")

    if options:
        lines.append("**Options:**")
        lines.append("")
        lines.extend(format_param(p) for p in options)
        lines.append("")

    return "\n".join(lines)


def walk_commands(group: Any, prefix: str = "") -> list[tuple[str, Any]]:
    """List every leaf command as (space-separated path, command), sorted by path."""
    leaves: list[tuple[str, Any]] = []
    commands = getattr(group, "commands", {})
    for name in sorted(commands):
        command = commands[name]
        path = f"{prefix}{name}"
        if getattr(command, "commands", None):
            leaves.extend(walk_commands(command, f"{path} "))
        else:
            leaves.append((path, command))
    return leaves


def generate_cli_reference() -> str:
    """Generate complete CLI reference documentation.

    Raises:
        RuntimeError: If the app has no sub-commands to document.
    """
    lines = [
        "---",
        "tags: [reference]",
        "---",
        "",
        "# CLI Commands Reference",
        "",
        "Complete reference for all finmaster CLI commands and options.",
        "",
        "## Usage",
        "",
        "```bash",
        "finmaster [COMMAND] [SUBCOMMAND] [OPTIONS]",
        "```",
        "",
        "## Global Options",
        "",
        "| Option | Description |",
        "|--------|-------------|",
        "| `--help` | Show help message and exit |",
        "",
        "## Commands",
        "",
    ]

    root = typer.main.get_command(app)
    leaves = walk_commands(root)
    if not leaves:
        raise RuntimeError("The finmaster app has no commands to document")
    for path, command in leaves:
        lines.append(generate_command_doc(path, command))
        lines.append("")

    return "\n".join(lines)


def main() -> None:
    """Generate and write CLI reference documentation."""
    output_path = Path(__file__).parent.parent / "docs" / "reference" / "cli-commands.md"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    output_path.write_text(generate_cli_reference(), encoding="utf-8")
    print(f"Generated CLI reference at {output_path}")


if __name__ == "__main__":
    main()
