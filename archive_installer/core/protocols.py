"""领域协议定义

宿主包管理器负责下载、解压和默认安装路径的计算，本包只依赖这里
定义的接口契约。使用 typing.Protocol 而非 ABC，宿主已有的安装器类
无需修改继承关系即可满足协议。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from archive_installer.core.models import PackageInfo


class BaseInstaller(Protocol):
    """宿主基础安装器协议

    install/update 完成后，包内容已解压到 get_install_path(package)。
    repo 参数是宿主的已安装仓库对象，本包只做透传。
    """

    def install(self, repo: Any, package: PackageInfo) -> None:
        ...

    def update(self, repo: Any, initial: PackageInfo, package: PackageInfo) -> None:
        ...

    def uninstall(self, repo: Any, package: PackageInfo) -> None:
        ...

    def get_install_path(self, package: PackageInfo) -> Path:
        """默认解压目录"""
        ...


class MarkerBackend(Protocol):
    """标记存储协议：按包名保存最近一次重定位的 URL"""

    def path_for(self, package_name: str) -> Path:
        ...

    def read_last_url(self, package_name: str) -> str | None:
        ...

    def write_last_url(self, package_name: str, url: str) -> Path:
        ...
