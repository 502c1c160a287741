#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025/11/1 15:12
@version : 1.0.0
@author  : William_Trouvaille
@function: 日志配置模块
"""

import os
import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(
        log_dir: str | None = "logs",
        console_level: str = "INFO",
        file_level: str = "DEBUG"
):
    """
    配置 Loguru 日志记录器，设置控制台和文件输出。

    此函数是幂等的：先移除所有现有处理器，再添加新的处理器。

    参数:
        log_dir (str | None): 日志文件目录；为 None 时只输出到控制台。
        console_level (str): 控制台输出的最低日志级别。
        file_level (str): 文件输出的最低日志级别，默认 DEBUG 以保留逐任务日志。
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=console_level.upper(),
        format=LOG_FORMAT,
        colorize=True,
        enqueue=True
    )

    if log_dir is None:
        logger.debug("未指定日志目录，仅输出到控制台。")
        return

    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError as e:
        # 目录不可用时退化为仅控制台输出
        logger.error(f"无法创建日志目录: {log_dir}。错误: {e}")
        return

    # 每天一个日志文件
    log_file_path = os.path.join(log_dir, "augkit_{time:YYYYMMDD}.log")

    logger.add(
        log_file_path,
        level=file_level.upper(),
        format=LOG_FORMAT,
        rotation="10 MB",
        retention="10 days",
        encoding="utf-8",
        enqueue=True,
        backtrace=True,
        diagnose=True
    )

    logger.info("Loguru 日志记录器配置完成。")
    logger.debug(f"控制台日志级别: {console_level.upper()}")
    logger.debug(f"文件日志级别: {file_level.upper()}")
    logger.debug(f"日志文件目录: {os.path.abspath(log_dir)}")
