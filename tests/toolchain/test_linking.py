"""
Tests for switching the active version pointer.
"""

import os
from unittest.mock import patch

import pytest

from govm.core.exceptions import (
    InvalidInstallationError,
    SwitchFailedError,
    VersionNotInstalledError,
)
from govm.toolchain.linking import ActiveVersionSwitcher
from govm.toolchain.version import Version
from tests.fixtures.installations import make_go_install


@pytest.fixture
def switcher(catalog):
    return ActiveVersionSwitcher(catalog)


class TestSwitchTo:
    """Test switch_to preconditions and outcome."""

    def test_creates_pointer(self, switcher, layout, installed_versions):
        installed_versions("1.21.0")

        result = switcher.switch_to(Version("1.21.0"))

        assert layout.active_path.is_symlink()
        assert switcher.current_target() == layout.version_dir("1.21.0")
        assert result.previous_target is None
        assert result.reported_version == Version("1.21.0")
        assert result.confirmed
        assert switcher.is_valid_link()

    def test_repoints_existing_pointer(self, switcher, layout, installed_versions):
        installed_versions("1.21.0", "1.22.5")
        switcher.switch_to(Version("1.21.0"))

        result = switcher.switch_to(Version("1.22.5"))

        assert result.previous_target == layout.version_dir("1.21.0")
        assert switcher.current_target() == layout.version_dir("1.22.5")
        assert layout.version_dir("1.21.0").is_dir()

    def test_switch_to_same_version(self, switcher, layout, installed_versions):
        installed_versions("1.21.0")
        switcher.switch_to(Version("1.21.0"))

        result = switcher.switch_to(Version("1.21.0"))

        assert result.previous_target == result.target

    def test_not_installed(self, switcher, layout):
        with pytest.raises(VersionNotInstalledError) as exc_info:
            switcher.switch_to(Version("1.21.0"))

        assert "govm install" in exc_info.value.remedy
        assert not layout.active_path.exists()

    def test_invalid_installation_is_not_removed(self, switcher, layout):
        broken = layout.version_dir("1.21.0")
        (broken / "bin").mkdir(parents=True)

        with pytest.raises(InvalidInstallationError):
            switcher.switch_to(Version("1.21.0"))

        assert broken.is_dir()
        assert not layout.active_path.is_symlink()

    def test_legacy_directory_refused(self, switcher, layout, installed_versions, legacy_install):
        installed_versions("1.21.0")

        with pytest.raises(SwitchFailedError) as exc_info:
            switcher.switch_to(Version("1.21.0"))

        assert "govm migrate" in exc_info.value.remedy
        assert legacy_install.is_dir() and not legacy_install.is_symlink()

    def test_failed_replace_leaves_pointer_unchanged(self, switcher, layout, installed_versions):
        installed_versions("1.21.0", "1.22.5")
        switcher.switch_to(Version("1.21.0"))

        with patch("govm.core.filesystem.os.replace", side_effect=OSError("EIO")):
            with pytest.raises(SwitchFailedError, match="EIO"):
                switcher.switch_to(Version("1.22.5"))

        assert switcher.current_target() == layout.version_dir("1.21.0")
        assert sorted(p.name for p in layout.install_root.iterdir()) == [
            "go",
            "go-1.21.0",
            "go-1.22.5",
        ]

    def test_version_mismatch_keeps_pointer(self, switcher, layout, caplog):
        make_go_install(layout.version_dir("1.21.0"), "1.21.0", reported="1.20.9")

        result = switcher.switch_to(Version("1.21.0"))

        assert switcher.current_target() == layout.version_dir("1.21.0")
        assert result.reported_version == Version("1.20.9")
        assert not result.confirmed
        assert "expected 1.21.0" in caplog.text

    def test_pointer_always_resolves(self, switcher, layout, installed_versions):
        versions = ["1.20.0", "1.21.0", "1.22.5", "1.21.0", "1.23.1"]
        installed_versions(*versions)

        for version in versions:
            switcher.switch_to(Version(version))
            assert os.path.isdir(layout.active_path)
            assert switcher.current_target() == layout.version_dir(version)
