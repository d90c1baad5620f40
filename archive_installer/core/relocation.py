"""归档内容重定位引擎

宿主安装器把包解压到默认目录之后，由本引擎把目录下的全部条目
移动到配置指定的目标目录，并记录本次分发 URL。

目标目录优先级（高者胜出）:
  1. 项目级 extra.installer-paths: {路径: [包名, ...]}，按声明顺序扫描，
     同一包名出现在多个路径下时最后一个生效
  2. 包级 extra.target-dir
  3. 默认解压目录本身（此时无需移动）

幂等:
  标记文件中的 URL 与 package.dist_url 相同时直接返回，不做任何文件系统修改。
  URL 变化（或标记不存在）时重新移动，完成后才写入新标记。

失败语义:
  任一条目移动失败立即抛出 RelocationError，已移动条目不回滚，
  标记不写入，下次 install/update 会对默认目录中剩余内容重新执行。
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any

from archive_installer.core.exceptions import ConfigError, RelocationError
from archive_installer.core.models import (
    KEY_INSTALLER_PATHS,
    PackageInfo,
    RelocationResult,
    RelocationStatus,
)
from archive_installer.core.protocols import MarkerBackend

logger = logging.getLogger(__name__)


class RelocationEngine:
    """按包执行一次性重定位"""

    def __init__(self, markers: MarkerBackend, project_root: str | Path = "") -> None:
        if not project_root:
            from archive_installer.core.config import get_config
            project_root = get_config().project_root
        self.markers = markers
        self.project_root = Path(project_root)

    # ------------------------------------------------------------------
    # 目标目录解析
    # ------------------------------------------------------------------

    def resolve_target_dir(
        self,
        package: PackageInfo,
        project_extra: dict[str, Any] | None,
        default_dir: str | Path,
    ) -> Path:
        """计算有效目标目录，不访问也不修改文件系统"""
        override = self._installer_path_for(package.name, project_extra)
        if override is not None:
            return self._absolute(override)

        settings = package.settings
        if settings.target_dir:
            return self._absolute(settings.target_dir)

        return Path(default_dir)

    def _installer_path_for(
        self, package_name: str, project_extra: dict[str, Any] | None,
    ) -> str | None:
        paths = (project_extra or {}).get(KEY_INSTALLER_PATHS) or {}
        if not isinstance(paths, dict):
            raise ConfigError(
                f"{KEY_INSTALLER_PATHS} 必须是 路径 -> 包名列表 的映射，"
                f"实际类型: {type(paths).__name__}"
            )

        matched: str | None = None
        for path, names in paths.items():
            if not isinstance(names, (list, tuple)):
                raise ConfigError(
                    f"{KEY_INSTALLER_PATHS}[{path!r}] 必须是包名列表，"
                    f"实际类型: {type(names).__name__}"
                )
            if package_name in names:
                if matched is not None:
                    logger.warning(
                        "%s 同时出现在多个 %s 条目中，使用最后一个: %s (忽略 %s)",
                        package_name, KEY_INSTALLER_PATHS, path, matched,
                    )
                matched = str(path)
        return matched

    def _absolute(self, path: str) -> Path:
        # 首尾的 "/" 一律去掉，路径始终相对项目根目录
        return (self.project_root / path.strip("/")).resolve()

    # ------------------------------------------------------------------
    # 重定位
    # ------------------------------------------------------------------

    def relocate(
        self,
        package: PackageInfo,
        project_extra: dict[str, Any] | None,
        default_dir: str | Path,
    ) -> RelocationResult:
        """重定位单个包，URL 未变化时为空操作"""
        url = package.dist_url
        if not url:
            logger.debug("无分发 URL，跳过重定位: %s", package.name)
            return RelocationResult(package=package.name, status=RelocationStatus.NO_DIST_URL)

        source = Path(default_dir)
        target = self.resolve_target_dir(package, project_extra, source)

        if package.settings.omit_first_directory:
            logger.debug("omit-first-directory 已解析，当前不参与移动: %s", package.name)

        if self.markers.read_last_url(package.name) == url:
            logger.debug("已重定位过相同 URL，跳过: %s (%s)", package.name, url)
            return RelocationResult(
                package=package.name, status=RelocationStatus.UP_TO_DATE, target_dir=target,
            )

        if source.resolve() == target.resolve():
            moved: list[str] = []
            status = RelocationStatus.IN_PLACE
            logger.info("目标即默认解压目录，无需移动: %s -> %s", package.name, target)
        else:
            moved = self._move_entries(package.name, source, target)
            status = RelocationStatus.RELOCATED
            logger.info(
                "已重定位 %s: %d 个条目 %s -> %s", package.name, len(moved), source, target,
            )

        self.markers.write_last_url(package.name, url)
        return RelocationResult(
            package=package.name, status=status, target_dir=target, moved=moved,
        )

    def _move_entries(self, package_name: str, source: Path, target: Path) -> list[str]:
        if not source.is_dir():
            raise RelocationError(
                f"默认解压目录不存在: {source}", package=package_name,
            )
        _ensure_target_dir(target)

        src_root = source.resolve()
        target_resolved = target.resolve()
        marker = self.markers.path_for(package_name)
        marker_resolved = marker.parent.resolve() / marker.name

        entries = sorted(source.iterdir(), key=lambda p: p.name)
        for entry in entries:
            dest_resolved = target_resolved / entry.name
            if dest_resolved == src_root or dest_resolved in src_root.parents:
                # 覆盖会删掉默认解压目录本身（连同未移动条目和标记），移动前整体拒绝
                raise RelocationError(
                    f"目标条目与默认解压目录重叠 ({package_name}): "
                    f"{entry} -> {target / entry.name}",
                    package=package_name, entry=entry.name,
                )

        moved: list[str] = []
        for entry in entries:
            location = src_root / entry.name
            if location == marker_resolved:
                continue
            if location == target_resolved or location in target_resolved.parents:
                logger.warning("条目包含目标目录，不移动: %s", entry)
                continue

            dest = target / entry.name
            try:
                _remove_existing(dest)
                os.replace(entry, dest)
            except OSError as e:
                raise RelocationError(
                    f"移动失败 ({package_name}): {entry} -> {dest} - {e}",
                    package=package_name, entry=entry.name,
                ) from e
            logger.debug("  %s -> %s", entry.name, dest)
            moved.append(entry.name)
        return moved


def _ensure_target_dir(target: Path) -> None:
    if target.exists() and not target.is_dir():
        raise ConfigError(f"目标路径不是目录: {target}")
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"无法创建目标目录: {target} - {e}") from e


def _remove_existing(dest: Path) -> None:
    """同名条目直接覆盖，不做冲突检测和备份"""
    if dest.is_symlink() or dest.is_file():
        dest.unlink()
    elif dest.is_dir():
        shutil.rmtree(dest)
