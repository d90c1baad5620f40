"""CLI — 重定位 / 标记状态 / 目标目录"""

from __future__ import annotations

from pathlib import Path

import click

from archive_installer.core.config import get_config
from archive_installer.core.exceptions import InstallerError
from archive_installer.core.installer import NonDestructiveArchiveInstaller, create_installer
from archive_installer.core.manifest import ProjectManifest
from archive_installer.core.marker import MarkerStore
from archive_installer.core.models import PackageInfo
from archive_installer.core.vendor import VendorDirInstaller


def register(group: click.Group) -> None:
    group.add_command(relocate)
    group.add_command(status)
    group.add_command(target)


def _load(manifest: str | None) -> tuple[ProjectManifest, NonDestructiveArchiveInstaller]:
    cfg = get_config()
    try:
        project = ProjectManifest.load(manifest or cfg.manifest)
    except InstallerError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e
    installer = create_installer(
        VendorDirInstaller(cfg.vendor_dir), project_extra=project.extra, config=cfg,
    )
    return project, installer


def _selected(
    project: ProjectManifest, installer: NonDestructiveArchiveInstaller, name: str | None,
) -> list[PackageInfo]:
    if name:
        try:
            return [project.get(name)]
        except InstallerError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e
    return [p for p in project.packages.values() if installer.supports(p.type)]


@click.command()
@click.option("--manifest", "-m", default=None, help="项目清单路径（默认取配置中的 manifest）")
@click.option("--name", default=None, help="指定包名（不指定则处理全部匹配类型的包）")
def relocate(manifest: str | None, name: str | None) -> None:
    """对已解压到 vendor 目录的包执行重定位"""
    project, installer = _load(manifest)
    packages = _selected(project, installer, name)
    if not packages:
        click.echo("没有需要处理的包。")
        return
    for pkg in packages:
        if not installer.supports(pkg.type):
            click.echo(f"  {pkg.name:30s} 跳过 (type={pkg.type})")
            continue
        try:
            result = installer.install(None, pkg)
        except InstallerError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e
        detail = f" -> {result.target_dir}" if result.target_dir else ""
        moved = f" ({len(result.moved)} 个条目)" if result.moved else ""
        click.echo(f"  {pkg.name:30s} {result.status}{detail}{moved}")


@click.command()
@click.option("--manifest", "-m", default=None, help="项目清单路径")
def status(manifest: str | None) -> None:
    """显示各包的标记 URL 与当前分发 URL"""
    project, installer = _load(manifest)
    packages = _selected(project, installer, None)
    if not packages:
        click.echo("没有匹配类型的包。")
        return
    for pkg in packages:
        try:
            last = installer.last_downloaded_url(pkg)
        except InstallerError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e
        if not pkg.dist_url:
            state = "无分发 URL"
        elif last == pkg.dist_url:
            state = "已是最新"
        else:
            state = "待重定位"
        click.echo(f"  {pkg.name:30s} {state:8s} last={last or '-'} dist={pkg.dist_url or '-'}")

    # 卸载不清理标记，清单中已不存在的包会留下孤立标记
    cfg = get_config()
    markers = MarkerStore(cfg.effective_marker_root, cfg.marker_filename)
    try:
        targets = _relocated_targets(project, installer, packages)
        orphans = {
            n: u for n, u in markers.list_markers().items()
            if n not in project.packages
            and not _inside_any(markers.path_for(n).parent.resolve(), targets)
        }
    except InstallerError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e
    for name, url in orphans.items():
        click.echo(f"  {name:30s} 孤立标记 last={url}")


def _relocated_targets(
    project: ProjectManifest, installer: NonDestructiveArchiveInstaller,
    packages: list[PackageInfo],
) -> list[Path]:
    """各包不同于默认解压目录的目标目录"""
    targets = []
    for pkg in packages:
        default_dir = installer.get_install_path(pkg).resolve()
        path = installer.engine.resolve_target_dir(pkg, project.extra, default_dir).resolve()
        if path != default_dir:
            targets.append(path)
    return targets


def _inside_any(path: Path, roots: list[Path]) -> bool:
    # 目标目录位于标记根之下时，重定位过去的用户文件可能恰好同名
    return any(path == root or root in path.parents for root in roots)


@click.command()
@click.argument("name")
@click.option("--manifest", "-m", default=None, help="项目清单路径")
def target(name: str, manifest: str | None) -> None:
    """解析包的有效目标目录（不移动文件）"""
    project, installer = _load(manifest)
    try:
        pkg = project.get(name)
        path = installer.engine.resolve_target_dir(
            pkg, project.extra, installer.get_install_path(pkg),
        )
    except InstallerError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e
    click.echo(str(path))
