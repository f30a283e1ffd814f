from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from artdeploy.core.config import DeployConfig, load_config
from artdeploy.core.errors import ErrorCode
from artdeploy.core.result import Err
from artdeploy.fetch.http import RealHttpClient
from artdeploy.fetch.repository import MavenRepository
from artdeploy.fetch.retriever import ArtifactFetcher
from artdeploy.output.console import ConsoleProtocol, RichConsole
from artdeploy.platform.detection import Platform, detect_platform
from artdeploy.release.lifecycle import ReleaseLifecycle


@dataclass(frozen=True, slots=True)
class CLIContext:
    config_path: Path
    config: DeployConfig
    platform: Platform
    console: ConsoleProtocol

    def lifecycle(self) -> ReleaseLifecycle:
        return ReleaseLifecycle(
            self.config,
            fetcher=build_fetcher(self.config),
            platform=self.platform,
            console=self.console,
        )


def build_fetcher(config: DeployConfig) -> ArtifactFetcher:
    repo_cfg = config.repository
    http = RealHttpClient(repo_cfg.timeout, ssl_verify=repo_cfg.ssl_verify)
    repository = MavenRepository(http, repo_cfg.url) if repo_cfg.url else None
    return ArtifactFetcher(http, repository=repository)


def build_context(
    config_path: Path,
    *,
    verbose: bool = False,
    version: str | None = None,
    force: bool | None = None,
    should_migrate: bool | None = None,
) -> CLIContext:
    console = RichConsole(verbose=verbose)

    config_result = load_config(config_path.expanduser())
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config = config_result.value.with_overrides(
        version=version,
        force=force,
        should_migrate=should_migrate,
    )
    return CLIContext(
        config_path=config_path,
        config=config,
        platform=detect_platform(),
        console=console,
    )
