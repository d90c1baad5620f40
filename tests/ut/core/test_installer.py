"""安装器生命周期测试 - install/update 后重定位，uninstall 透传"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

import archive_installer.core.config as cfgmod
from archive_installer.core.exceptions import DependencyError, RelocationError
from archive_installer.core.installer import NonDestructiveArchiveInstaller, create_installer
from archive_installer.core.marker import MarkerStore
from archive_installer.core.models import PackageInfo, RelocationStatus
from archive_installer.core.relocation import RelocationEngine
from archive_installer.core.vendor import VendorDirInstaller

PKG_TYPE = "non-destructive-archive-installer"


class FakeDownloader(VendorDirInstaller):
    """模拟宿主: install/update 时把归档内容解压到默认目录"""

    def __init__(self, vendor_dir: Path, files: dict[str, str]) -> None:
        super().__init__(vendor_dir)
        self.files = files
        self.calls: list[str] = []

    def _extract(self, package: PackageInfo) -> None:
        root = self.get_install_path(package)
        for rel, content in self.files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)

    def install(self, repo, package):
        self.calls.append("install")
        self._extract(package)

    def update(self, repo, initial, package):
        self.calls.append("update")
        self._extract(package)

    def uninstall(self, repo, package):
        self.calls.append("uninstall")
        super().uninstall(repo, package)


@pytest.fixture()
def cfg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> cfgmod.Config:
    c = cfgmod.Config(project_root=str(tmp_path), vendor_dir=str(tmp_path / "vendor"))
    monkeypatch.setattr(cfgmod, "_current", c)
    return c


def _widget(url: str, **extra) -> PackageInfo:
    return PackageInfo(
        name="acme/widget", type=PKG_TYPE, dist_url=url, version="1.0.0", extra=extra,
    )


class TestSupports:
    def test_only_declared_type(self) -> None:
        installer = NonDestructiveArchiveInstaller(MagicMock(), MagicMock())
        assert installer.supports(PKG_TYPE)
        assert not installer.supports("library")
        assert not installer.supports("")

    def test_custom_type_from_config(self, tmp_path: Path) -> None:
        cfg = cfgmod.Config(vendor_dir=str(tmp_path), package_type="asset-archive")
        installer = create_installer(MagicMock(), config=cfg)
        assert installer.supports("asset-archive")
        assert not installer.supports(PKG_TYPE)


class TestLifecycle:
    def test_acme_widget_scenario(self, tmp_path: Path, cfg: cfgmod.Config) -> None:
        """首次安装移动，同 URL 更新不动，URL 变化再次移动并覆盖"""
        base = FakeDownloader(tmp_path / "vendor", {"README.md": "v1", "src/app.py": "v1"})
        installer = create_installer(base, project_extra={})
        target = tmp_path / "vendor" / "acme"
        pkg = _widget("https://example.com/w-1.0.zip", **{"target-dir": "vendor/acme"})

        result = installer.install(None, pkg)
        assert result.status == RelocationStatus.RELOCATED
        assert (target / "README.md").read_text() == "v1"
        assert (target / "src" / "app.py").read_text() == "v1"
        assert installer.last_downloaded_url(pkg) == "https://example.com/w-1.0.zip"

        result = installer.update(None, pkg, pkg)
        assert result.status == RelocationStatus.UP_TO_DATE
        # 宿主重新解压的内容留在默认目录
        assert (tmp_path / "vendor" / "acme" / "widget" / "README.md").exists()

        base.files = {"README.md": "v2", "src/app.py": "v2"}
        new_pkg = _widget("https://example.com/w-2.0.zip", **{"target-dir": "vendor/acme"})
        result = installer.update(None, pkg, new_pkg)
        assert result.status == RelocationStatus.RELOCATED
        assert (target / "README.md").read_text() == "v2"
        assert (target / "src" / "app.py").read_text() == "v2"
        assert installer.last_downloaded_url(new_pkg) == "https://example.com/w-2.0.zip"
        assert base.calls == ["install", "update", "update"]

    def test_project_installer_paths_used(self, tmp_path: Path, cfg: cfgmod.Config) -> None:
        base = FakeDownloader(tmp_path / "vendor", {"logo.svg": "<svg/>"})
        extra = {"installer-paths": {"web/assets": ["acme/widget"]}}
        installer = create_installer(base, project_extra=extra)

        installer.install(None, _widget("u1", **{"target-dir": "vendor/acme"}))

        assert (tmp_path / "web" / "assets" / "logo.svg").exists()
        assert not (tmp_path / "vendor" / "acme" / "logo.svg").exists()

    def test_uninstall_is_pass_through(self, tmp_path: Path, cfg: cfgmod.Config) -> None:
        marker_root = tmp_path / "markers"
        cfg.marker_root = str(marker_root)
        base = FakeDownloader(tmp_path / "vendor", {"README.md": "v1"})
        installer = create_installer(base)
        pkg = _widget("u1", **{"target-dir": "web"})
        installer.install(None, pkg)

        installer.uninstall(None, pkg)

        assert base.calls[-1] == "uninstall"
        assert not (tmp_path / "vendor" / "acme" / "widget").exists()
        assert (tmp_path / "web" / "README.md").exists()
        assert MarkerStore(marker_root).read_last_url("acme/widget") == "u1"

    def test_base_failure_skips_relocation(self, tmp_path: Path) -> None:
        base = MagicMock()
        base.install.side_effect = DependencyError("download failed")
        engine = MagicMock()
        installer = NonDestructiveArchiveInstaller(base, engine)

        with pytest.raises(DependencyError):
            installer.install(None, _widget("u1"))
        engine.relocate.assert_not_called()

    def test_relocation_error_propagates(self, tmp_path: Path) -> None:
        base = MagicMock()
        base.get_install_path.return_value = tmp_path / "missing"
        engine = RelocationEngine(MarkerStore(tmp_path / "m"), project_root=tmp_path)
        installer = NonDestructiveArchiveInstaller(base, engine)

        with pytest.raises(RelocationError):
            installer.install(None, _widget("u1", **{"target-dir": "web"}))

    def test_relocate_receives_install_path_and_project_extra(self, tmp_path: Path) -> None:
        base = MagicMock()
        base.get_install_path.return_value = str(tmp_path / "vendor" / "acme" / "widget")
        engine = MagicMock()
        extra = {"installer-paths": {}}
        installer = NonDestructiveArchiveInstaller(base, engine, project_extra=extra)
        pkg = _widget("u1")

        installer.update("repo", pkg, pkg)

        base.update.assert_called_once_with("repo", pkg, pkg)
        engine.relocate.assert_called_once_with(
            pkg, extra, tmp_path / "vendor" / "acme" / "widget",
        )


class TestVendorDirInstaller:
    def test_install_path(self, tmp_path: Path) -> None:
        base = VendorDirInstaller(tmp_path / "vendor")
        assert base.get_install_path(_widget("u")) == tmp_path / "vendor" / "acme" / "widget"

    def test_install_requires_extracted_dir(self, tmp_path: Path) -> None:
        base = VendorDirInstaller(tmp_path / "vendor")
        with pytest.raises(DependencyError, match="未解压到默认目录"):
            base.install(None, _widget("u"))

    def test_install_with_extracted_dir(self, tmp_path: Path) -> None:
        (tmp_path / "vendor" / "acme" / "widget").mkdir(parents=True)
        VendorDirInstaller(tmp_path / "vendor").update(None, _widget("u"), _widget("u"))

    def test_uninstall_removes_tree(self, tmp_path: Path) -> None:
        d = tmp_path / "vendor" / "acme" / "widget"
        (d / "src").mkdir(parents=True)
        base = VendorDirInstaller(tmp_path / "vendor")
        base.uninstall(None, _widget("u"))
        assert not d.exists()
        # 重复卸载不报错
        base.uninstall(None, _widget("u"))
