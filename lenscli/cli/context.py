"""
CLI Context.

Per-invocation state carried on the click context object: the remote
client and the global output options. Commands obtain the client from
here, never from module state, so tests can inject their own:

    runner.invoke(app, ["topics"], obj=CliContext(client=stub_client))
"""

from dataclasses import dataclass

import typer

from lenscli.api.client import LensesClient
from lenscli.cli.output import OutputMode, Renderer, select_mode


@dataclass
class CliContext:
    """State shared by the root callback and every command."""

    client: LensesClient | None = None
    output: str | None = None
    host: str | None = None
    token: str | None = None
    timeout: float | None = None

    def get_client(self) -> LensesClient:
        """Return the injected client, or build one from configuration."""
        if self.client is None:
            self.client = LensesClient.from_config(
                host=self.host,
                token=self.token,
                timeout=self.timeout,
            )
        return self.client

    def renderer(
        self,
        names: bool = False,
        unwrap: bool = False,
        silent: bool = False,
        no_newline: bool = False,
    ) -> Renderer:
        mode = select_mode(self.output or OutputMode.TABLE.value, names=names, unwrap=unwrap)
        return Renderer(mode, silent=silent, no_newline=no_newline)

    def close(self) -> None:
        if self.client is not None:
            self.client.close()


def get_state(ctx: typer.Context) -> CliContext:
    """Fetch the CliContext installed by the root callback."""
    return ctx.ensure_object(CliContext)
