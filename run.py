"""
本地直接启动 mucbot 的入口脚本。

用法示例（在项目根目录运行）：

    python run.py onboard
    python run.py run -c ~/.mucbot/config.json -p mucbot.plugins.builtin
    python run.py status
"""

from mucbot.cli.commands import app


if __name__ == "__main__":
    app()
