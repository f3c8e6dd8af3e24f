"""
mucbot模块的入口点

当使用 `python -m mucbot` 命令运行mucbot时，会执行此文件。
它导入并启动CLI应用程序。
"""

from mucbot.cli.commands import app

if __name__ == "__main__":
    app()
