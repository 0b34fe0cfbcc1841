"""Click building blocks shared by linknav commands.

``NavCommand`` / ``NavGroup`` take an ``examples=`` string and expose it
through an eager ``--examples`` flag, so ``--help`` stays short.  The
decorators below declare the arguments every document-level command
accepts.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeAlias

import click

Decorator: TypeAlias = Callable[[Callable[..., Any]], Callable[..., Any]]


class _ExamplesMixin:
    """Adds the ``--examples`` flag when the command was given examples."""

    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._show_examples,
                    help="Show usage examples.",
                )
            )

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if value:
            click.echo(f"Examples for '{ctx.command_path}':\n\n{self.examples}")
            ctx.exit(0)


class NavCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class NavGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands are ``NavCommand`` by default."""

    command_class = NavCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


def target_argument() -> Decorator:
    """The TARGET argument: a vault path or a link name as written in [[...]]."""
    return click.argument("target")


def refresh_option() -> Decorator:
    """``--refresh``: drop the cached LinkSet of TARGET before reading it."""
    return click.option("--refresh", is_flag=True, help="Ignore any cached links for TARGET.")
