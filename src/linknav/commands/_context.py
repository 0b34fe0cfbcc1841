"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Runs navigator operations on a fresh event loop
and centralizes result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeAlias

import click

from linknav.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from linknav.config.settings import LinkNavSettings
    from linknav.plugins.manager import PluginManager
    from linknav.services.navigator import NavigatorService
    from linknav.services.result import ServiceResult

Operation: TypeAlias = "Callable[[NavigatorService], Awaitable[ServiceResult]]"


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  Plugins are loaded
    lazily on first use so ``--help`` and ``--version`` never scan
    entry points or the vault.
    """

    def __init__(self, settings: LinkNavSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None

        # Configure structured logging
        from linknav.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            vault_root=settings.vault_root,
        )

        # Enable telemetry context var when verbose
        if settings.verbose:
            from linknav.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def plugins(self) -> PluginManager:
        """The plugin manager (created lazily on first access)."""
        if self._plugins is None:
            from linknav.plugins.manager import PluginManager

            self._plugins = PluginManager()
            self._plugins.discover_and_load()
        return self._plugins

    def navigator(self) -> NavigatorService:
        """A new navigator over the configured vault.

        Each command gets its own, because the cache's tasks belong to
        the event loop that created them.
        """
        from linknav.services.navigator import NavigatorService

        return NavigatorService.for_vault(
            self.settings.vault_root,
            self.settings.config,
            plugins=self.plugins,
        )

    def run(self, operation: Operation) -> ServiceResult:
        """Run *operation* against a started navigator and close it afterwards."""

        async def _main() -> ServiceResult:
            async with self.navigator() as nav:
                return await operation(nav)

        return asyncio.run(_main())

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
                self._emit_notices()
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def _emit_notices(self) -> None:
        if self.settings.quiet or self._plugins is None or self._plugins.notices is None:
            return
        for message in self._plugins.notices.messages:
            click.echo(f"NOTICE: {message}", err=True)
        self._plugins.notices.messages.clear()
