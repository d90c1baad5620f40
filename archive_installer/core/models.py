"""核心数据模型

PackageInfo 是宿主包管理器提供的只读包视图；PackageSettings 是从
包级 extra 中解析出的配置；RelocationResult 记录一次重定位的结果。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# 包级 extra 中识别的键
KEY_TARGET_DIR = "target-dir"
KEY_OMIT_FIRST_DIRECTORY = "omit-first-directory"
# 项目级 extra 中识别的键
KEY_INSTALLER_PATHS = "installer-paths"


@dataclass
class PackageInfo:
    """宿主提供的包元信息"""

    name: str
    type: str = "library"
    dist_url: str = ""  # 为空表示没有可分发的归档（如 metapackage）
    extra: dict[str, Any] = field(default_factory=dict)
    version: str = ""  # 仅供展示，标记文件按包名而非版本区分

    @property
    def settings(self) -> PackageSettings:
        return PackageSettings.from_extra(self.extra)


@dataclass
class PackageSettings:
    """包级配置"""

    target_dir: str = ""
    # 只解析不生效：移动逻辑不会剥离首层目录
    omit_first_directory: bool = False

    @classmethod
    def from_extra(cls, extra: dict[str, Any] | None) -> PackageSettings:
        extra = extra or {}
        omit = extra.get(KEY_OMIT_FIRST_DIRECTORY, False)
        return cls(
            target_dir=str(extra.get(KEY_TARGET_DIR) or ""),
            omit_first_directory=str(omit).lower() == "true",
        )


class RelocationStatus:
    """重定位结果状态"""

    NO_DIST_URL = "no_dist_url"
    UP_TO_DATE = "up_to_date"
    IN_PLACE = "in_place"
    RELOCATED = "relocated"


@dataclass
class RelocationResult:
    """一次 relocate 调用的结果"""

    package: str
    status: str
    target_dir: Path | None = None
    moved: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """是否写入了新的标记"""
        return self.status in (RelocationStatus.IN_PLACE, RelocationStatus.RELOCATED)
