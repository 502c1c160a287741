#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025/11/1 22:51
@author  : William_Trouvaille
@function: 批处理进度统计与进度条包装器
@description: 提供了 Progress 类，它封装了 TQDM，线程安全地累计已完成任务数，
              向外部进度接收器按任务推送百分比，并使用 "基于时间的节流" 策略更新进度条后缀。
"""
import math
import threading
import time
from typing import Callable, Dict, Optional

from loguru import logger
from tqdm import tqdm

ProgressSink = Callable[[int], None]


def percent_complete(completed: int, total: int) -> int:
    """round(completed / total * 100)，0.5 向上取整；total 为 0 时视为已完成。"""
    if total <= 0:
        return 100
    return int(math.floor(completed / total * 100 + 0.5))


class Progress:
    """
    批处理任务的进度记录器。

    每个任务结束时调用一次 advance()，计数在锁内更新，
    因此无论任务以何种顺序完成，推送给接收器的百分比都是非递减的，
    并且只有全部任务结束时才会到达 100。
    """

    def __init__(
            self,
            total: int,
            sink: Optional[ProgressSink] = None,
            description: str = "增强处理中",
            show_bar: bool = True,
            leave: bool = False,
            update_interval_sec: float = 0.5
    ):
        """
        参数:
            total (int): 任务总数。
            sink (callable, optional): 接收 [0,100] 整数百分比的回调。
            description (str): 进度条描述文本。
            show_bar (bool): 是否在终端显示 TQDM 进度条。
            leave (bool): 结束后是否保留进度条。
            update_interval_sec (float): 更新进度条后缀的最小间隔（秒）。
        """
        self.total = int(total)
        self.sink = sink
        self.completed = 0
        self.status_counts: Dict[str, int] = {}
        self.last_percent: Optional[int] = None

        self._lock = threading.Lock()
        self.update_interval = update_interval_sec
        self.last_update_time = time.monotonic()

        self.tqdm_bar = tqdm(
            total=self.total,
            desc=description,
            leave=leave,
            ncols=120,
            dynamic_ncols=False,
            disable=not show_bar,
            bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}{postfix}]"
        )

        logger.debug(f"Progress '{description}' 已初始化 (任务总数: {self.total})。")

    def advance(self, status: str = "completed") -> int:
        """记录一个结束的任务并返回当前百分比。"""
        with self._lock:
            if self.completed >= self.total:
                raise RuntimeError(f"已完成任务数超过总数 {self.total}")
            self.completed += 1
            self.status_counts[status] = self.status_counts.get(status, 0) + 1
            percent = percent_complete(self.completed, self.total)
            self.tqdm_bar.update(1)
            self._refresh_postfix()
            self._emit(percent)
            return percent

    def finish(self) -> None:
        """没有任何任务时直接推送 100，保证接收器总能收到终止值。"""
        with self._lock:
            if self.total == 0 and self.last_percent is None:
                self._emit(100)

    def _emit(self, percent: int) -> None:
        self.last_percent = percent
        if self.sink is None:
            return
        try:
            self.sink(percent)
        except Exception as e:
            # 外部接收器出错不应中断批处理
            logger.warning(f"进度接收器处理 {percent}% 时出错: {e}")

    def _refresh_postfix(self, force: bool = False) -> None:
        current_time = time.monotonic()
        if not force and (current_time - self.last_update_time) < self.update_interval:
            return
        self.last_update_time = current_time
        try:
            self.tqdm_bar.set_postfix(self.status_counts)
        except Exception as e:
            logger.debug(f"更新进度条失败（可能已关闭）: {e}")

    def close(self) -> None:
        """关闭进度条，在关闭前写入最终的状态统计。"""
        with self._lock:
            self._refresh_postfix(force=True)
            self.tqdm_bar.close()
        logger.debug(f"Progress 已关闭: {self.completed}/{self.total}, 状态统计={self.status_counts}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
