"""CLI context shared between the root group and its commands."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import click

from spec_mcp.config.server import ServerConfig


@dataclass
class CLIContext:
    """State resolved once by the root group."""

    config: ServerConfig = field(default_factory=ServerConfig)
    specs_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.specs_dir is not None:
            self.config.specs_dir = self.specs_dir
        else:
            self.specs_dir = self.config.get_specs_dir()


def set_context(ctx: click.Context, cli_ctx: CLIContext) -> CLIContext:
    ctx.obj = cli_ctx
    return cli_ctx


def get_context(ctx: click.Context) -> CLIContext:
    """Return the CLI context, creating a default one for bare invocations."""
    root = ctx.find_root()
    if not isinstance(root.obj, CLIContext):
        root.obj = CLIContext(config=ServerConfig.from_env())
    return root.obj
