"""统一异常体系

所有业务异常继承 InstallerError。重定位过程中的错误一律向上抛给宿主
安装器的 install/update 调用，由宿主判定为安装失败，核心内部不吞异常。
CLI 层据此输出友好提示。
"""

from __future__ import annotations


class InstallerError(Exception):
    """安装器基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(InstallerError):
    """配置无效：installer-paths / target-dir 不可用、包名非法、清单格式错误"""

    code = "CONFIG_ERROR"


class RelocationError(InstallerError):
    """移动已解压条目失败，已移动的条目不回滚，标记文件不更新"""

    code = "RELOCATION_ERROR"

    def __init__(self, message: str, package: str = "", entry: str = "") -> None:
        super().__init__(message)
        self.package = package
        self.entry = entry


class MarkerError(InstallerError):
    """标记文件读写失败（文件不存在不算错误）"""

    code = "MARKER_ERROR"


class DependencyError(InstallerError):
    """宿主侧的包未就绪，如默认解压目录不存在"""

    code = "DEPENDENCY_ERROR"
