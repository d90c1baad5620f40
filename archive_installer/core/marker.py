"""下载状态标记存储

每个包名对应一个纯文本标记文件:

    {root}/{package_name}/download-status.txt

文件内容就是最近一次完成重定位的分发 URL，没有换行、没有其他结构。
标记只用于变更检测：首次重定位成功后创建，之后每次覆盖，从不删除。

写入不是原子的。中途崩溃留下的截断内容在下次比较时与真实 URL 不等，
只会触发一次多余但安全的重新移动。
"""

from __future__ import annotations

import logging
from pathlib import Path

from archive_installer.core.config import DEFAULT_MARKER_FILENAME
from archive_installer.core.exceptions import ConfigError, MarkerError

logger = logging.getLogger(__name__)


class MarkerStore:
    """按包名存取最近一次重定位的 URL"""

    def __init__(self, root: str | Path = "", filename: str = "") -> None:
        if not root or not filename:
            from archive_installer.core.config import get_config
            cfg = get_config()
            root = root or cfg.effective_marker_root
            filename = filename or cfg.marker_filename
        self.root = Path(root)
        self.filename = filename or DEFAULT_MARKER_FILENAME

    def path_for(self, package_name: str) -> Path:
        """计算标记文件路径，不访问文件系统"""
        return self.root.joinpath(*_name_parts(package_name), self.filename)

    def read_last_url(self, package_name: str) -> str | None:
        """读取最近一次重定位的 URL，从未重定位过返回 None"""
        path = self.path_for(package_name)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise MarkerError(f"读取标记文件失败: {path} - {e}") from e

    def write_last_url(self, package_name: str, url: str) -> Path:
        """原样写入 URL，覆盖旧值"""
        path = self.path_for(package_name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(url, encoding="utf-8")
        except OSError as e:
            raise MarkerError(f"写入标记文件失败: {path} - {e}") from e
        logger.info("标记已更新: %s -> %s", package_name, url)
        return path

    def list_markers(self) -> dict[str, str]:
        """扫描根目录下所有标记，返回 {包名: URL}"""
        if not self.root.is_dir():
            return {}
        markers: dict[str, str] = {}
        for path in sorted(self.root.rglob(self.filename)):
            if not path.is_file():
                continue
            name = path.parent.relative_to(self.root).as_posix()
            if name == ".":
                continue
            markers[name] = self.read_last_url(name) or ""
        return markers


def _name_parts(package_name: str) -> list[str]:
    """拆分 vendor/name 形式的包名，拒绝会逃出根目录或互相冲突的名字"""
    if not package_name or "\\" in package_name or package_name.startswith("/"):
        raise ConfigError(f"非法包名: {package_name!r}")
    parts = package_name.split("/")
    if any(p in ("", ".", "..") for p in parts):
        raise ConfigError(f"非法包名: {package_name!r}")
    return parts
