"""archive_installer 命令行接口

正常情况下重定位由宿主安装器在 install/update 后调用；
命令行用于运维排查：手动触发重定位、查看标记状态、解析目标目录。
"""

import os

import click

from archive_installer import __version__
from archive_installer.core.config import init_config
from archive_installer.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default=None, help="配置文件路径 (YAML)")
def main(config_path: str | None) -> None:
    """archive-installer - 归档包解压后一次性重定位"""
    setup_logging(
        level=os.getenv("ARCHIVE_INSTALLER_LOG_LEVEL", "INFO"),
        json_output=os.getenv("ARCHIVE_INSTALLER_LOG_JSON", "") == "1",
    )
    if config_path:
        init_config(config_path)


from archive_installer.cli.cmd_relocate import register as _reg_relocate  # noqa: E402

_reg_relocate(main)
