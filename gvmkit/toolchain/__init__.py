"""
Go toolchain management for gvmkit.

This module provides functionality for:
- Release catalog lookup and version resolution
- Package selection
- Archive download, caching and verification
- Installation into the version tree
- Switching the active toolchain
"""

from gvmkit.toolchain.models import (
    AcquisitionResult,
    ActivationResult,
    PackageDescriptor,
    VersionDescriptor,
)
from gvmkit.toolchain.catalog import (
    GoReleaseCatalog,
    Release,
    VersionCatalog,
    find_release,
)
from gvmkit.toolchain.selector import (
    FirstCandidateStrategy,
    IndexStrategy,
    PackageSelector,
    SelectionStrategy,
)
from gvmkit.toolchain.acquisition import (
    AcquisitionPipeline,
    ConfirmationStrategy,
    StaticConfirmation,
    cache_path_for,
)
from gvmkit.toolchain.installer import InstallationManager
from gvmkit.toolchain.linking import (
    ActivationSwitch,
    JunctionLinkStrategy,
    LinkCreationError,
    LinkStrategy,
    SymlinkLinkStrategy,
    VersionProbe,
    select_link_strategies,
)
from gvmkit.toolchain.orchestrator import (
    InstallOrchestrator,
    InstallOutcome,
    InstallResult,
    WorkflowState,
)

__all__ = [
    # Models
    "AcquisitionResult",
    "ActivationResult",
    "PackageDescriptor",
    "VersionDescriptor",
    # Catalog
    "GoReleaseCatalog",
    "Release",
    "VersionCatalog",
    "find_release",
    # Selection
    "FirstCandidateStrategy",
    "IndexStrategy",
    "PackageSelector",
    "SelectionStrategy",
    # Acquisition
    "AcquisitionPipeline",
    "ConfirmationStrategy",
    "StaticConfirmation",
    "cache_path_for",
    # Installation
    "InstallationManager",
    # Activation
    "ActivationSwitch",
    "JunctionLinkStrategy",
    "LinkCreationError",
    "LinkStrategy",
    "SymlinkLinkStrategy",
    "VersionProbe",
    "select_link_strategies",
    # Workflow
    "InstallOrchestrator",
    "InstallOutcome",
    "InstallResult",
    "WorkflowState",
]
