"""
End-to-end install workflow.

Stages run strictly in sequence and each one is a hard gate:

    RESOLVING -> SELECTING -> ACQUIRING -> VERIFYING -> EXTRACTING -> ACTIVATING -> DONE

Any error moves the workflow to ERROR and propagates unchanged to the caller.
Declining to install an unverifiable package moves it to ABORTED.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from gvmkit.core.directory import HomeLayout
from gvmkit.core.exceptions import VersionNotInstalledError
from gvmkit.core.platform import PlatformInfo, detect_platform
from gvmkit.toolchain.acquisition import AcquisitionPipeline
from gvmkit.toolchain.catalog import VersionCatalog, strip_go_prefix
from gvmkit.toolchain.installer import InstallationManager
from gvmkit.toolchain.linking import ActivationSwitch
from gvmkit.toolchain.models import (
    AcquisitionResult,
    ActivationResult,
    VersionDescriptor,
)
from gvmkit.toolchain.selector import PackageSelector

logger = logging.getLogger(__name__)


class WorkflowState(Enum):
    """Stages of the install workflow."""

    IDLE = "idle"
    RESOLVING = "resolving"
    SELECTING = "selecting"
    ACQUIRING = "acquiring"
    VERIFYING = "verifying"
    EXTRACTING = "extracting"
    ACTIVATING = "activating"
    DONE = "done"
    ABORTED = "aborted"
    ERROR = "error"


class InstallOutcome(Enum):
    """User-facing result of an install request."""

    INSTALLED = "installed"
    ACTIVATED = "activated"
    ABORTED = "aborted"


@dataclass
class InstallResult:
    """Result of InstallOrchestrator.install()."""

    version: VersionDescriptor
    outcome: InstallOutcome
    install_dir: Optional[Path] = None
    acquisition: Optional[AcquisitionResult] = None
    activation: Optional[ActivationResult] = None


class InstallOrchestrator:
    """
    Sequences resolution, selection, acquisition, installation and activation.

    Example:
        >>> orchestrator = InstallOrchestrator(
        ...     catalog=GoReleaseCatalog(settings.mirrors),
        ...     layout=settings.layout,
        ...     selector=PackageSelector(),
        ...     acquisition=AcquisitionPipeline(settings.layout.downloads_dir),
        ...     installer=InstallationManager(settings.layout),
        ...     switch=ActivationSwitch(settings.layout.active_link),
        ... )
        >>> result = orchestrator.install("1.21.5")
    """

    def __init__(
        self,
        catalog: VersionCatalog,
        layout: HomeLayout,
        selector: PackageSelector,
        acquisition: AcquisitionPipeline,
        installer: InstallationManager,
        switch: ActivationSwitch,
        platform: Optional[PlatformInfo] = None,
    ):
        self.catalog = catalog
        self.layout = layout
        self.selector = selector
        self.acquisition = acquisition
        self.installer = installer
        self.switch = switch
        self.platform = platform or detect_platform()
        self.state = WorkflowState.IDLE

    def _enter(self, state: WorkflowState) -> None:
        logger.debug(f"Workflow: {self.state.value} -> {state.value}")
        self.state = state

    def install(
        self,
        version_request: str,
        skip_checksum: bool = False,
        activate: bool = True,
    ) -> InstallResult:
        """
        Install (and by default activate) a Go version.

        Args:
            version_request: Version identifier or pattern
            skip_checksum: Bypass archive verification
            activate: Switch the active link after installing

        Returns:
            InstallResult

        Raises:
            GvmKitError: Any stage failure, unchanged
        """
        self.state = WorkflowState.IDLE
        try:
            return self._install(version_request, skip_checksum, activate)
        except BaseException:
            self._enter(WorkflowState.ERROR)
            raise

    def _install(
        self, version_request: str, skip_checksum: bool, activate: bool
    ) -> InstallResult:
        self._enter(WorkflowState.RESOLVING)
        version, candidates = self.catalog.resolve(
            version_request, self.platform.os, self.platform.arch
        )
        logger.info(f"Resolved {version_request} to go{version.name}")

        # Check if the version is already installed
        self.installer.ensure_not_installed(version.name)

        self._enter(WorkflowState.SELECTING)
        package = self.selector.select(version, candidates)

        self._enter(WorkflowState.ACQUIRING)
        acquired = self.acquisition.acquire(
            version,
            package,
            extension=self.platform.archive_extension(),
            skip_checksum=skip_checksum,
            on_verify=lambda: self._enter(WorkflowState.VERIFYING),
        )
        if acquired is None:
            self._enter(WorkflowState.ABORTED)
            return InstallResult(version=version, outcome=InstallOutcome.ABORTED)

        if not acquired.verified:
            logger.warning(f"Installing unverified archive {acquired.archive_path.name}")

        self._enter(WorkflowState.EXTRACTING)
        install_dir = self.installer.install(version.name, acquired.archive_path)

        if not activate:
            self._enter(WorkflowState.DONE)
            return InstallResult(
                version=version,
                outcome=InstallOutcome.INSTALLED,
                install_dir=install_dir,
                acquisition=acquired,
            )

        self._enter(WorkflowState.ACTIVATING)
        activation = self.switch.activate(install_dir)

        self._enter(WorkflowState.DONE)
        return InstallResult(
            version=version,
            outcome=InstallOutcome.ACTIVATED,
            install_dir=install_dir,
            acquisition=acquired,
            activation=activation,
        )

    def use(self, version: str) -> ActivationResult:
        """
        Activate an already installed version.

        Raises:
            VersionNotInstalledError: If the version is not installed
            ActivationFailedError: If the link cannot be switched
        """
        name = strip_go_prefix(version)
        if not self.installer.is_installed(name):
            raise VersionNotInstalledError(name)
        return self.switch.activate(self.installer.version_dir(name))
