"""日志配置工具。"""

from __future__ import annotations

import logging


def setup_logging(level: int = logging.INFO) -> None:
    """初始化命令行日志。

    批量生成只在单个线程内逐个处理种子，日志格式中带上线程名，
    便于区分 CLI 主线程与嵌入调用方（如 GUI 后台线程）输出的记录。
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s",
    )
