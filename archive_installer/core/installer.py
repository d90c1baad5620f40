"""非破坏式归档安装器

以组合方式包装宿主的基础安装器:

  install   → base.install   → 重定位
  update    → base.update    → 重定位
  uninstall → base.uninstall （不清理标记和已重定位的文件）

只处理类型为 non-destructive-archive-installer 的包，其余类型由宿主原样处理。

用法:
    from archive_installer.core.installer import create_installer

    installer = create_installer(base, project_extra=root_package_extra)
    if installer.supports(package.type):
        installer.install(repo, package)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from archive_installer.core.config import DEFAULT_PACKAGE_TYPE
from archive_installer.core.marker import MarkerStore
from archive_installer.core.models import PackageInfo, RelocationResult
from archive_installer.core.relocation import RelocationEngine

if TYPE_CHECKING:
    from archive_installer.core.config import Config
    from archive_installer.core.protocols import BaseInstaller

logger = logging.getLogger(__name__)


class NonDestructiveArchiveInstaller:
    """安装/更新后把解压内容一次性移动到目标目录"""

    PACKAGE_TYPE = DEFAULT_PACKAGE_TYPE

    def __init__(
        self,
        base: BaseInstaller,
        engine: RelocationEngine,
        project_extra: dict[str, Any] | None = None,
        package_type: str = "",
    ) -> None:
        self.base = base
        self.engine = engine
        self.project_extra = project_extra or {}
        self.package_type = package_type or self.PACKAGE_TYPE

    def supports(self, package_type: str) -> bool:
        return package_type == self.package_type

    def get_install_path(self, package: PackageInfo) -> Path:
        return Path(self.base.get_install_path(package))

    def install(self, repo: Any, package: PackageInfo) -> RelocationResult:
        self.base.install(repo, package)
        return self._relocate(package)

    def update(
        self, repo: Any, initial: PackageInfo, package: PackageInfo,
    ) -> RelocationResult:
        self.base.update(repo, initial, package)
        return self._relocate(package)

    def uninstall(self, repo: Any, package: PackageInfo) -> None:
        self.base.uninstall(repo, package)

    def last_downloaded_url(self, package: PackageInfo) -> str | None:
        """最近一次重定位的分发 URL"""
        return self.engine.markers.read_last_url(package.name)

    def _relocate(self, package: PackageInfo) -> RelocationResult:
        return self.engine.relocate(
            package, self.project_extra, self.get_install_path(package),
        )


def create_installer(
    base: BaseInstaller,
    project_extra: dict[str, Any] | None = None,
    config: Config | None = None,
) -> NonDestructiveArchiveInstaller:
    """按配置组装标记存储、重定位引擎和安装器"""
    if config is None:
        from archive_installer.core.config import get_config
        config = get_config()
    markers = MarkerStore(config.effective_marker_root, config.marker_filename)
    engine = RelocationEngine(markers, project_root=config.project_root)
    return NonDestructiveArchiveInstaller(
        base, engine, project_extra=project_extra, package_type=config.package_type,
    )
