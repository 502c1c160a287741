#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025/11/2 00:22
@author  : William_Trouvaille
@function: 通用装饰器
@description: 提供可复用的计时与错误记录装饰器。
"""
import functools
import time
from typing import Any, Callable

from loguru import logger

from .helpers import format_time


def time_it(func: Callable) -> Callable:
    """
    装饰器：测量并记录函数的执行时间。

    用法:
        @time_it
        def run(self, sources, operator_ids):
            ...
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        start_time = time.monotonic()
        try:
            return func(*args, **kwargs)
        finally:
            duration = time.monotonic() - start_time
            logger.info(f"函数 '{func.__name__}' 执行完毕，耗时: {format_time(duration)}")

    return wrapper


def log_errors(re_raise: bool = True, default: Any = None) -> Callable:
    """
    装饰器（工厂）：自动捕获异常并使用 logger.exception() 记录堆栈。

    参数:
        re_raise (bool): 记录后是否重新抛出异常。
        default (Any): re_raise=False 时的返回值。

    用法:
        @log_errors(re_raise=False, default=1)
        def main():
            ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.error(f"函数 '{func.__name__}' 中发生未捕获的异常！")
                logger.exception(e)
                if re_raise:
                    raise
                return default

        return wrapper

    return decorator
