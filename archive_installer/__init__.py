"""non-destructive-archive-installer - 归档包解压后重定位安装器"""

__version__ = "0.3.0"
