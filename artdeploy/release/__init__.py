"""Release lifecycle: manifests, version tracking, deploy decisions, hooks."""

from .decision import Decision, DecisionEngine
from .errors import DeployAborted, DeployError, describe
from .extract import ArchiveExtractor, ExtractError, ExtractResult, Extractor
from .hooks import CommandHook, Hook, HookCommandFailed, Hooks
from .lifecycle import (
    DeployReport,
    LifecycleState,
    PreSeedReport,
    ReleaseLifecycle,
    ReleasePaths,
)
from .manifest import Manifest, ManifestDiff, diff, generate, load, manifests_equal, persist
from .tracker import Release, VersionTracker

__all__ = [
    # decision
    "Decision",
    "DecisionEngine",
    # errors
    "DeployAborted",
    "DeployError",
    "describe",
    # extract
    "ArchiveExtractor",
    "ExtractError",
    "ExtractResult",
    "Extractor",
    # hooks
    "CommandHook",
    "Hook",
    "HookCommandFailed",
    "Hooks",
    # lifecycle
    "DeployReport",
    "LifecycleState",
    "PreSeedReport",
    "ReleaseLifecycle",
    "ReleasePaths",
    # manifest
    "Manifest",
    "ManifestDiff",
    "diff",
    "generate",
    "load",
    "manifests_equal",
    "persist",
    # tracker
    "Release",
    "VersionTracker",
]
