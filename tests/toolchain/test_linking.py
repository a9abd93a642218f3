"""
Unit tests for active link management.
"""

import os
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
from filelock import FileLock

from gvmkit.core.exceptions import ActivationFailedError
from gvmkit.core.locking import LockManager
from gvmkit.core.platform import PlatformInfo
from gvmkit.toolchain.installer import InstallationManager
from gvmkit.toolchain.linking import (
    ActivationSwitch,
    JunctionLinkStrategy,
    LinkCreationError,
    LinkStrategy,
    SymlinkLinkStrategy,
    VersionProbe,
    remove_link,
    resolve_link,
    select_link_strategies,
)

unix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="Symlinks need privileges on Windows"
)


class FailingStrategy(LinkStrategy):
    name = "failing"

    def __init__(self):
        self.calls = 0

    def create(self, link_path: Path, target_path: Path) -> None:
        self.calls += 1
        raise LinkCreationError("not supported here")


@pytest.fixture
def installed(gvm_home):
    """Two installed version directories."""
    dirs = {}
    for name in ("1.21.5", "1.22.0"):
        path = gvm_home.version_dir(name)
        (path / "bin").mkdir(parents=True)
        (path / "VERSION").write_text(f"go{name}\n")
        dirs[name] = path
    return dirs


class TestSelectLinkStrategies:
    """Test per-platform strategy selection."""

    def test_windows_prefers_junction(self):
        strategies = select_link_strategies(PlatformInfo("windows", "amd64"))

        assert [type(s) for s in strategies] == [
            JunctionLinkStrategy,
            SymlinkLinkStrategy,
        ]

    @pytest.mark.parametrize("os_name", ["linux", "darwin", "freebsd"])
    def test_unix_uses_symlink(self, os_name):
        strategies = select_link_strategies(PlatformInfo(os_name, "amd64"))

        assert [s.name for s in strategies] == ["symlink"]


@unix_only
class TestActivationSwitch:
    """Test ActivationSwitch.activate()."""

    def test_link_resolves_to_installed_dir(self, gvm_home, installed):
        switch = ActivationSwitch(gvm_home.active_link, [SymlinkLinkStrategy()])

        result = switch.activate(installed["1.21.5"])

        assert result.mechanism == "symlink"
        assert resolve_link(gvm_home.active_link) == installed["1.21.5"]
        assert os.path.samefile(gvm_home.active_link, installed["1.21.5"])
        assert (gvm_home.active_link / "VERSION").read_text() == "go1.21.5\n"

    def test_switch_replaces_previous_link(self, gvm_home, installed):
        switch = ActivationSwitch(gvm_home.active_link, [SymlinkLinkStrategy()])
        switch.activate(installed["1.21.5"])

        switch.activate(installed["1.22.0"])

        assert switch.current_target() == installed["1.22.0"]
        # The previously active version is untouched
        assert (installed["1.21.5"] / "VERSION").exists()

    def test_falls_back_to_next_strategy(self, gvm_home, installed):
        failing = FailingStrategy()
        switch = ActivationSwitch(
            gvm_home.active_link, [failing, SymlinkLinkStrategy()]
        )

        result = switch.activate(installed["1.21.5"])

        assert failing.calls == 1
        assert result.mechanism == "symlink"

    def test_all_strategies_fail(self, gvm_home, installed):
        switch = ActivationSwitch(gvm_home.active_link, [FailingStrategy()])

        with pytest.raises(ActivationFailedError, match="not supported here"):
            switch.activate(installed["1.21.5"])

        assert installed["1.21.5"].is_dir()
        assert not os.path.lexists(gvm_home.active_link)

    def test_empty_strategy_list_is_kept(self, gvm_home, installed):
        switch = ActivationSwitch(gvm_home.active_link, [])

        assert switch.strategies == []
        with pytest.raises(ActivationFailedError, match="Failed to link"):
            switch.activate(installed["1.21.5"])

    def test_missing_target(self, gvm_home):
        switch = ActivationSwitch(gvm_home.active_link, [SymlinkLinkStrategy()])

        with pytest.raises(ActivationFailedError, match="does not exist"):
            switch.activate(gvm_home.version_dir("9.9.9"))

    def test_non_empty_directory_at_link_path(self, gvm_home, installed):
        """Test a real directory occupying the link path is not deleted."""
        gvm_home.active_link.mkdir()
        (gvm_home.active_link / "keep.txt").write_text("x")
        switch = ActivationSwitch(gvm_home.active_link, [SymlinkLinkStrategy()])

        with pytest.raises(ActivationFailedError, match="not a link"):
            switch.activate(installed["1.21.5"])

        assert (gvm_home.active_link / "keep.txt").exists()

    def test_probe_output_reported(self, gvm_home, installed):
        probe = Mock(return_value="go1.21.5 linux/amd64")
        switch = ActivationSwitch(
            gvm_home.active_link, [SymlinkLinkStrategy()], probe=probe
        )

        result = switch.activate(installed["1.21.5"])

        assert result.probe_output == "go1.21.5 linux/amd64"
        probe.assert_called_once_with(gvm_home.active_link)

    def test_probe_failure_is_not_an_error(self, gvm_home, installed):
        probe = Mock(side_effect=RuntimeError("exec format error"))
        switch = ActivationSwitch(
            gvm_home.active_link, [SymlinkLinkStrategy()], probe=probe
        )

        result = switch.activate(installed["1.21.5"])

        assert result.probe_output is None
        assert switch.current_target() == installed["1.21.5"]

    def test_activation_under_lock(self, gvm_home, installed):
        switch = ActivationSwitch(
            gvm_home.active_link,
            [SymlinkLinkStrategy()],
            lock_manager=LockManager(gvm_home.lock_dir),
        )

        switch.activate(installed["1.21.5"])

        assert switch.current_target() == installed["1.21.5"]

    def test_lock_timeout(self, gvm_home, installed):
        manager = LockManager(gvm_home.lock_dir)
        switch = ActivationSwitch(
            gvm_home.active_link,
            [SymlinkLinkStrategy()],
            lock_manager=manager,
            lock_timeout=0.1,
        )
        holder = FileLock(manager.activation_lock_path)
        holder.acquire()
        try:
            with pytest.raises(ActivationFailedError, match="activation lock"):
                switch.activate(installed["1.21.5"])
        finally:
            holder.release()

        assert not os.path.lexists(gvm_home.active_link)


@unix_only
class TestLinkHelpers:
    """Test link inspection helpers."""

    def test_resolve_non_link(self, tmp_path):
        assert resolve_link(tmp_path) is None

    def test_resolve_relative_link(self, tmp_path):
        (tmp_path / "versions" / "1.21.5").mkdir(parents=True)
        link = tmp_path / "go"
        link.symlink_to(Path("versions") / "1.21.5")

        assert resolve_link(link) == tmp_path / "versions" / "1.21.5"

    def test_remove_missing(self, tmp_path):
        assert remove_link(tmp_path / "go") is False

    def test_remove_dangling_symlink(self, tmp_path):
        link = tmp_path / "go"
        link.symlink_to(tmp_path / "gone")

        assert remove_link(link) is True
        assert not os.path.lexists(link)

    def test_remove_regular_file(self, tmp_path):
        path = tmp_path / "go"
        path.write_text("x")

        assert remove_link(path) is True

    def test_remove_empty_directory(self, tmp_path):
        path = tmp_path / "go"
        path.mkdir()

        assert remove_link(path) is True
        assert not path.exists()


@unix_only
class TestVersionProbe:
    """Test VersionProbe against a real installed toolchain layout."""

    def test_reports_version(self, gvm_home, make_go_archive):
        root = InstallationManager(gvm_home).install("1.21.5", make_go_archive())

        assert VersionProbe()(root) == "go1.21.5 linux/amd64"

    def test_missing_binary(self, tmp_path):
        assert VersionProbe()(tmp_path) is None

    def test_non_zero_exit(self, tmp_path):
        (tmp_path / "bin").mkdir()
        binary = tmp_path / "bin" / "go"
        binary.write_text("#!/bin/sh\necho boom >&2\nexit 2\n")
        binary.chmod(0o755)

        assert VersionProbe()(tmp_path) is None
