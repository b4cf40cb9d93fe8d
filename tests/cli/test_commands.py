"""
End-to-end tests for govm commands, driven through the CLI entry point.

Every test runs against a temporary install root and home directory with an
empty PATH; network access is mocked with responses.
"""

import shutil
from unittest.mock import patch

import pytest
import responses
import yaml

from govm.cli.parser import CLI
from govm.core.filesystem import read_link_target
from govm.core.platform import PlatformInfo
from tests.fixtures.installations import build_go_archive_bytes, make_go_install

INDEX_URL = "https://go.test/dl/"
BASE_URL = "https://go.test/dl/"
LINUX_AMD64 = PlatformInfo("linux", "amd64")
INDEX_PAGE = (
    '<a class="download" href="/dl/go1.23.1.linux-amd64.tar.gz">go1.23.1.linux-amd64.tar.gz</a>\n'
    '<a class="download" href="/dl/go1.22.7.linux-amd64.tar.gz">go1.22.7.linux-amd64.tar.gz</a>\n'
)


@pytest.fixture
def govm(tmp_path, isolated_home, empty_path, install_root, monkeypatch):
    """
    Run govm commands against a temporary install root.

    Example:
        def test_env(govm):
            assert govm("env") == 0
    """
    gopath = isolated_home / "go"
    monkeypatch.setenv("GOPATH", str(gopath))
    monkeypatch.setenv("GOBIN", str(gopath / "bin"))
    monkeypatch.setenv("SHELL", "/bin/bash")

    scratch = tmp_path / "scratch"
    scratch.mkdir()
    config = tmp_path / "config.yaml"
    config.write_text(
        yaml.safe_dump(
            {
                "index_url": INDEX_URL,
                "download_base_url": BASE_URL,
                "scratch_dir": str(scratch),
                "download_retries": 1,
            }
        )
    )

    def _run(*args: str) -> int:
        argv = ["--config", str(config), "--install-root", str(install_root), *args]
        with patch("govm.toolchain.installer.detect_platform", return_value=LINUX_AMD64):
            return CLI().run(argv)

    _run.home = isolated_home
    _run.scratch = scratch
    return _run


def answers(monkeypatch, *replies):
    """Feed successive answers to input()."""
    remaining = iter(replies)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(remaining))


def serve_archive(version: str, **kwargs):
    responses.add(
        responses.GET,
        f"{BASE_URL}go{version}.linux-amd64.tar.gz",
        body=build_go_archive_bytes(version, **kwargs),
        status=200,
    )


def serve_index():
    responses.add(responses.GET, INDEX_URL, body=INDEX_PAGE, status=200)


class TestInstallCommand:
    @responses.activate
    def test_fresh_install(self, govm, layout, capsys):
        serve_archive("1.23.1")

        assert govm("-y", "install", "1.23.1") == 0

        assert read_link_target(layout.active_path) == layout.version_dir("1.23.1")
        out = capsys.readouterr().out
        assert "Go 1.23.1 is ready" in out
        assert "export GOPATH=" in (govm.home / ".bashrc").read_text()
        assert list(govm.scratch.iterdir()) == []

    @responses.activate
    def test_install_latest(self, govm, layout):
        serve_index()
        serve_archive("1.23.1")

        assert govm("-y", "install") == 0

        assert read_link_target(layout.active_path) == layout.version_dir("1.23.1")

    @responses.activate
    def test_no_profile(self, govm, capsys):
        serve_archive("1.23.1")

        assert govm("-y", "install", "--no-profile", "go1.23.1") == 0

        assert not (govm.home / ".bashrc").exists()
        assert 'eval "$(govm env)"' in capsys.readouterr().out

    def test_already_active(self, govm, layout, installed_versions, capsys):
        installed_versions("1.23.1")
        layout.active_path.symlink_to(layout.version_dir("1.23.1"))

        assert govm("-y", "install", "1.23.1") == 0

        assert "already installed and active" in capsys.readouterr().out

    @responses.activate
    def test_dangling_pointer_reinstalls(self, govm, layout, installed_versions, capsys):
        installed_versions("1.23.1")
        layout.active_path.symlink_to(layout.version_dir("1.23.1"))
        shutil.rmtree(layout.version_dir("1.23.1"))
        serve_archive("1.23.1")

        assert govm("--silent", "install", "1.23.1", "--no-profile") == 0

        assert "already installed and active" not in capsys.readouterr().out
        assert (layout.version_dir("1.23.1") / "bin" / "go").exists()
        assert read_link_target(layout.active_path) == layout.version_dir("1.23.1")

    @responses.activate
    def test_foreign_symlink_reports_error(self, govm, layout, tmp_path, capsys):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        layout.version_dir("1.23.1").symlink_to(elsewhere)
        serve_archive("1.23.1")

        assert govm("-y", "install", "--no-profile", "1.23.1") == 1

        err = capsys.readouterr().err
        assert "ERROR: Installation of Go 1.23.1 failed" in err
        assert "Traceback" not in err
        assert layout.version_dir("1.23.1").is_symlink()
        assert not layout.active_path.is_symlink()

    def test_installed_but_inactive_switches(self, govm, layout, installed_versions):
        installed_versions("1.22.5", "1.23.1")
        layout.active_path.symlink_to(layout.version_dir("1.22.5"))

        assert govm("-y", "install", "1.23.1") == 0

        assert read_link_target(layout.active_path) == layout.version_dir("1.23.1")

    @responses.activate
    def test_force_reinstall(self, govm, layout, installed_versions):
        installed_versions("1.23.1")
        (layout.version_dir("1.23.1") / "marker").write_text("old")
        layout.active_path.symlink_to(layout.version_dir("1.23.1"))
        serve_archive("1.23.1")

        assert govm("-y", "install", "--force", "1.23.1") == 0

        assert not (layout.version_dir("1.23.1") / "marker").exists()

    @responses.activate
    def test_download_failure(self, govm, layout, installed_versions, capsys):
        installed_versions("1.22.5")
        layout.active_path.symlink_to(layout.version_dir("1.22.5"))
        responses.add(responses.GET, f"{BASE_URL}go1.23.1.linux-amd64.tar.gz", status=404)

        assert govm("-y", "install", "1.23.1") == 1

        assert "ERROR:" in capsys.readouterr().err
        assert read_link_target(layout.active_path) == layout.version_dir("1.22.5")
        assert sorted(p.name for p in layout.install_root.iterdir()) == ["go", "go-1.22.5"]

    def test_invalid_version(self, govm, capsys):
        assert govm("-y", "install", "latest") == 1
        assert "Invalid version format" in capsys.readouterr().err

    def test_legacy_migrates_first(self, govm, layout, legacy_install, capsys):
        assert govm("-y", "install", "1.23.1") == 0

        assert read_link_target(layout.active_path) == layout.version_dir("1.20.0")
        assert not layout.version_dir("1.23.1").exists()
        assert "Re-run the install command" in capsys.readouterr().out

    @responses.activate
    def test_interactive_cleanup_after_install(self, govm, layout, installed_versions, monkeypatch):
        installed_versions("1.22.5")
        layout.active_path.symlink_to(layout.version_dir("1.22.5"))
        serve_archive("1.23.1")
        answers(monkeypatch, "y", "a")

        assert govm("install", "1.23.1") == 0

        assert not layout.version_dir("1.22.5").exists()
        assert read_link_target(layout.active_path) == layout.version_dir("1.23.1")

    @responses.activate
    def test_interactive_keep_other_versions(self, govm, layout, installed_versions, monkeypatch):
        installed_versions("1.22.5")
        serve_archive("1.23.1")
        answers(monkeypatch, "")

        assert govm("install", "1.23.1") == 0

        assert layout.version_dir("1.22.5").exists()


class TestUseCommand:
    def test_switch(self, govm, layout, installed_versions, capsys):
        installed_versions("1.22.5", "1.23.1")
        layout.active_path.symlink_to(layout.version_dir("1.23.1"))

        assert govm("use", "1.22.5") == 0

        assert read_link_target(layout.active_path) == layout.version_dir("1.22.5")
        assert "Now using Go 1.22.5" in capsys.readouterr().out

    def test_not_installed(self, govm, layout, installed_versions, capsys):
        installed_versions("1.22.5")
        layout.active_path.symlink_to(layout.version_dir("1.22.5"))

        assert govm("use", "1.24.0") == 1

        err = capsys.readouterr().err
        assert "ERROR: Go 1.24.0 is not installed" in err
        assert "govm install" in err
        assert read_link_target(layout.active_path) == layout.version_dir("1.22.5")

    def test_mismatched_binary_warns(self, govm, layout, capsys):
        make_go_install(layout.version_dir("1.22.5"), "1.22.5", reported="1.21.0")

        assert govm("use", "1.22.5") == 0

        assert "WARNING:" in capsys.readouterr().err
        assert read_link_target(layout.active_path) == layout.version_dir("1.22.5")


class TestInformationalCommands:
    def test_current(self, govm, layout, installed_versions, capsys):
        installed_versions("1.22.5")
        layout.active_path.symlink_to(layout.version_dir("1.22.5"))

        assert govm("current") == 0
        assert "Go 1.22.5" in capsys.readouterr().out

    def test_current_none(self, govm, capsys):
        assert govm("current") == 1
        assert "No Go installation found" in capsys.readouterr().out

    def test_current_legacy(self, govm, legacy_install, capsys):
        assert govm("current") == 0
        out = capsys.readouterr().out
        assert "Go 1.20.0" in out
        assert "govm migrate" in out

    def test_current_dangling_pointer(self, govm, layout, capsys):
        layout.active_path.symlink_to(layout.version_dir("1.23.1"))

        assert govm("current") == 1

        captured = capsys.readouterr()
        assert "WARNING:" in captured.err
        assert "does not exist" in captured.err
        assert "Go 1.23.1 is selected but not installed" in captured.out
        assert "govm install 1.23.1" in captured.out

    @responses.activate
    def test_list_dangling_pointer(self, govm, layout, installed_versions, capsys):
        installed_versions("1.22.5")
        layout.active_path.symlink_to(layout.version_dir("1.23.1"))
        serve_index()

        assert govm("list") == 0

        captured = capsys.readouterr()
        assert f"{layout.active_path} points to" in captured.err
        assert "* 1.22.5" not in captured.out
        assert "1.22.5" in captured.out

    def test_current_valid_pointer_has_no_warning(self, govm, layout, installed_versions, capsys):
        installed_versions("1.22.5")
        layout.active_path.symlink_to(layout.version_dir("1.22.5"))

        assert govm("current") == 0
        assert "WARNING:" not in capsys.readouterr().err

    @responses.activate
    def test_list(self, govm, layout, installed_versions, capsys):
        installed_versions("1.21.0", "1.23.1", "1.22.5")
        layout.active_path.symlink_to(layout.version_dir("1.22.5"))
        serve_index()

        assert govm("list") == 0

        lines = [line.strip() for line in capsys.readouterr().out.splitlines()]
        versions = [line for line in lines if line and line[-1].isdigit() and "." in line]
        assert versions[:3] == ["1.23.1", "* 1.22.5", "1.21.0"]
        assert "Latest available: 1.23.1" in lines

    @responses.activate
    def test_list_offline(self, govm, capsys):
        responses.add(responses.GET, INDEX_URL, status=503)

        assert govm("list") == 0
        assert "Latest available" not in capsys.readouterr().out

    def test_env(self, govm, install_root, capsys):
        assert govm("env") == 0

        out = capsys.readouterr().out.splitlines()
        assert f"export GOPATH={govm.home / 'go'}" in out
        assert f"export PATH=$PATH:{install_root / 'go' / 'bin'}" in out


class TestCleanupCommand:
    def test_unattended(self, govm, layout, installed_versions, capsys):
        installed_versions("1.22.5", "1.23.1")
        layout.active_path.symlink_to(layout.version_dir("1.23.1"))

        assert govm("-y", "cleanup") == 0

        assert not layout.version_dir("1.22.5").exists()
        assert layout.version_dir("1.23.1").exists()
        assert "Removed Go 1.22.5" in capsys.readouterr().out

    def test_interactive_selection(self, govm, layout, installed_versions, monkeypatch):
        installed_versions("1.21.0", "1.22.5", "1.23.1")
        layout.active_path.symlink_to(layout.version_dir("1.23.1"))
        answers(monkeypatch, "s", "2")

        assert govm("cleanup") == 0

        assert layout.version_dir("1.22.5").exists()
        assert not layout.version_dir("1.21.0").exists()

    def test_interactive_none(self, govm, layout, installed_versions, monkeypatch, capsys):
        installed_versions("1.22.5", "1.23.1")
        layout.active_path.symlink_to(layout.version_dir("1.23.1"))
        answers(monkeypatch, "n")

        assert govm("cleanup") == 0

        assert layout.version_dir("1.22.5").exists()
        assert "Nothing removed" in capsys.readouterr().out

    def test_dry_run(self, govm, layout, installed_versions, capsys):
        installed_versions("1.22.5", "1.23.1")
        layout.active_path.symlink_to(layout.version_dir("1.23.1"))

        assert govm("-y", "cleanup", "--dry-run") == 0

        assert layout.version_dir("1.22.5").exists()
        assert "Would remove Go 1.22.5" in capsys.readouterr().out


class TestMigrateCommand:
    def test_unattended(self, govm, layout, legacy_install, capsys):
        assert govm("-y", "migrate") == 0

        assert read_link_target(layout.active_path) == layout.version_dir("1.20.0")
        assert not layout.backup_path.exists()
        assert "Migrated Go 1.20.0" in capsys.readouterr().out

    def test_declined(self, govm, layout, legacy_install, monkeypatch, capsys):
        answers(monkeypatch, "n")

        assert govm("migrate") == 0

        assert not layout.active_path.is_symlink()
        assert "left unchanged" in capsys.readouterr().out

    def test_nothing_to_migrate(self, govm, capsys):
        assert govm("migrate") == 0
        assert "Nothing to migrate" in capsys.readouterr().out

    def test_stale_backup(self, govm, layout, legacy_install, capsys):
        make_go_install(layout.backup_path, "1.19.0")

        assert govm("-y", "migrate") == 1

        err = capsys.readouterr().err
        assert "already exists" in err
        assert str(layout.backup_path) in err
        assert legacy_install.is_dir() and not legacy_install.is_symlink()
