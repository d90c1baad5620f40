"""集中配置管理

提供统一的配置入口：目录布局、标记文件位置、包类型标识。
支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from archive_installer.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_TYPE = "non-destructive-archive-installer"
DEFAULT_MARKER_FILENAME = "download-status.txt"


@dataclass
class Config:
    """安装器全局配置"""

    # 目录
    project_root: str = "."
    vendor_dir: str = "vendor"
    marker_root: str = ""  # 为空时与 vendor_dir 相同，标记文件落在包的默认解压目录内
    marker_filename: str = DEFAULT_MARKER_FILENAME
    manifest: str = "composer.json"

    # 宿主匹配
    package_type: str = DEFAULT_PACKAGE_TYPE

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @property
    def effective_marker_root(self) -> str:
        return self.marker_root or self.vendor_dir

    @classmethod
    def from_file(cls, path: str = "configs/installer.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known and k != "extra"}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "configs/installer.yml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
