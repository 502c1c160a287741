#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025/11/1 21:45
@author  : William_Trouvaille
@function: 通用辅助函数
"""

import time


def get_time(format_str: str = "[%Y-%m-%d %H:%M:%S]") -> str:
    """
    获取格式化的当前时间。

    参数:
        format_str (str): 时间格式字符串 (例如 "[%Y-%m-%d %H:%M:%S]")

    返回:
        str: 格式化的时间字符串
    """
    return str(time.strftime(format_str, time.localtime()))


def format_time(seconds: float) -> str:
    """
    格式化时间（秒）为可读的字符串 (例如 "1h 15m 30.1s")。
    """
    if seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        remaining_seconds = seconds % 60
        return f"{minutes}m {remaining_seconds:.1f}s"
    else:
        hours = int(seconds // 3600)
        remaining_minutes = int((seconds % 3600) // 60)
        remaining_seconds = seconds % 60
        return f"{hours}h {remaining_minutes}m {remaining_seconds:.1f}s"


def format_size(num_bytes: float) -> str:
    """把字节数格式化为 B/KB/MB/GB。"""
    if abs(num_bytes) < 1024.0:
        return f"{int(num_bytes)} B"
    for unit in ("KB", "MB"):
        num_bytes /= 1024.0
        if abs(num_bytes) < 1024.0:
            return f"{num_bytes:.1f} {unit}"
    return f"{num_bytes / 1024.0:.1f} GB"
