"""本地 vendor 目录基础安装器

适用于归档已由外部流程下载并解压到 {vendor_dir}/{包名} 的场景，
本身不做任何下载或解压。CLI 以它作为宿主安装器的替身。
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any

from archive_installer.core.exceptions import DependencyError
from archive_installer.core.models import PackageInfo

logger = logging.getLogger(__name__)


class VendorDirInstaller:
    """以 vendor_dir/<name> 作为默认解压目录的基础安装器"""

    def __init__(self, vendor_dir: str | Path = "") -> None:
        if not vendor_dir:
            from archive_installer.core.config import get_config
            vendor_dir = get_config().vendor_dir
        self.vendor_dir = Path(vendor_dir)

    def get_install_path(self, package: PackageInfo) -> Path:
        return self.vendor_dir / package.name

    def install(self, repo: Any, package: PackageInfo) -> None:
        self._require_extracted(package)

    def update(self, repo: Any, initial: PackageInfo, package: PackageInfo) -> None:
        self._require_extracted(package)

    def uninstall(self, repo: Any, package: PackageInfo) -> None:
        path = self.get_install_path(package)
        if path.is_dir():
            shutil.rmtree(path)
            logger.info("已删除安装目录: %s", path)

    def _require_extracted(self, package: PackageInfo) -> None:
        path = self.get_install_path(package)
        if not path.is_dir():
            raise DependencyError(f"包 '{package.name}' 未解压到默认目录: {path}")
