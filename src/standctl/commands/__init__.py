"""Subcommand modules for standctl.

Provides register_commands() which uses deferred imports to keep
``standctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group.

    Uses deferred imports so modules are only loaded when actually invoked.
    2 groups (have subcommands) + 1 standalone command.
    """
    # --- Groups ---
    from standctl.commands.buyers import buyers
    from standctl.commands.stands import stands

    cli.add_command(stands)
    cli.add_command(buyers)

    # --- Standalone commands ---
    from standctl.commands.import_cmd import import_cmd

    cli.add_command(import_cmd)
