"""项目清单加载

清单格式与 composer.json 相同（JSON 即合法 YAML，YAML 写法同样可用）:

    extra:
      installer-paths:
        web/assets: [acme/widget]
    packages:
      - name: acme/widget
        type: non-destructive-archive-installer
        version: 1.0.0
        dist: {url: https://example.com/widget-1.0.zip}
        extra: {target-dir: vendor/acme}

packages 也可以写成 {包名: 包定义} 的映射。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from archive_installer.core.exceptions import ConfigError
from archive_installer.core.models import PackageInfo
from archive_installer.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


@dataclass
class ProjectManifest:
    """项目级 extra + 按声明顺序排列的包定义"""

    extra: dict[str, Any] = field(default_factory=dict)
    packages: dict[str, PackageInfo] = field(default_factory=dict)

    @classmethod
    def load(cls, path: str | Path) -> ProjectManifest:
        p = Path(path)
        if not p.exists():
            raise ConfigError(f"清单文件不存在: {p}")
        try:
            data = load_yaml(p)
        except (yaml.YAMLError, ValueError, OSError) as e:
            raise ConfigError(f"清单文件无法解析: {p} - {e}") from e

        extra = data.get("extra") or {}
        if not isinstance(extra, dict):
            raise ConfigError(f"{p}: extra 必须是映射")

        raw = data.get("packages") or []
        if isinstance(raw, dict):
            entries = [{"name": name, **(body or {})} for name, body in raw.items()]
        elif isinstance(raw, list):
            entries = raw
        else:
            raise ConfigError(f"{p}: packages 必须是列表或映射")

        packages: dict[str, PackageInfo] = {}
        for entry in entries:
            pkg = _parse_package(entry, p)
            packages[pkg.name] = pkg

        logger.info("已加载 %d 个包定义: %s", len(packages), p)
        return cls(extra=extra, packages=packages)

    def get(self, name: str) -> PackageInfo:
        pkg = self.packages.get(name)
        if pkg is None:
            raise ConfigError(
                f"包 '{name}' 不在清单中。可用: {list(self.packages)}"
            )
        return pkg


def _parse_package(entry: Any, source: Path) -> PackageInfo:
    if not isinstance(entry, dict):
        raise ConfigError(f"{source}: 包定义必须是映射，实际: {entry!r}")
    name = entry.get("name")
    if not name:
        raise ConfigError(f"{source}: 包定义缺少 name")

    dist = entry.get("dist") or {}
    dist_url = dist.get("url", "") if isinstance(dist, dict) else ""
    extra = entry.get("extra") or {}
    if not isinstance(extra, dict):
        raise ConfigError(f"{source}: 包 '{name}' 的 extra 必须是映射")

    return PackageInfo(
        name=str(name),
        type=entry.get("type", "library"),
        dist_url=str(dist_url or ""),
        extra=extra,
        version=str(entry.get("version", "")),
    )
