#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-19 14:05:12
@author  : William_Trouvaille
@function: 批量增强管道
@detail:
    - 对 "图像 × 算子" 的笛卡尔积逐任务执行增强，图像优先、算子按选择顺序
    - 单个任务失败时退化为原图副本（DEGRADED），不会中断整个批次
    - 解码失败只跳过对应图像的任务
    - 进度按任务推送 round(完成数/总数*100)，非递减，全部结束时恰好为 100
    - 支持线程池并发执行与协作式取消，每个任务持有独立的随机数生成器
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
import threading
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from loguru import logger

from .augmentation.base import BaseTransform, make_generator
from .augmentation.params import ParameterSet
from .augmentation.registry import TRANSFORM_REGISTRY, get_transform
from .decorators import time_it
from .errors import BatchCancelledError, BatchPreconditionError, ImageDecodeError, ParameterError
from .image import Image, SourceItem
from .progress import Progress, ProgressSink


# ========================================================================
# 1. 任务与结果
# ========================================================================

class TaskState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    DEGRADED = "degraded"


@dataclass
class Task:
    """一个 (图像, 算子, 已解析参数) 工作单元。"""

    index: int
    original_name: str
    source: Image
    operator_id: str
    params: Mapping[str, Any]
    state: TaskState = TaskState.PENDING


@dataclass(frozen=True)
class BatchEntry:
    original_name: str
    operator_id: str
    image: Image
    status: TaskState
    error: Optional[str] = None


@dataclass
class BatchResult:
    """按任务顺序排列的结果集合。"""

    entries: List[BatchEntry]
    skipped_sources: List[str]
    operator_ids: List[str]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[BatchEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> BatchEntry:
        return self.entries[index]

    @property
    def degraded(self) -> List[BatchEntry]:
        return [entry for entry in self.entries if entry.status is TaskState.DEGRADED]

    def summary(self) -> Dict[str, int]:
        return {
            "entries": len(self.entries),
            "completed": len(self.entries) - len(self.degraded),
            "degraded": len(self.degraded),
            "skipped_sources": len(self.skipped_sources),
        }


# ========================================================================
# 2. 协作式取消
# ========================================================================

class CancellationToken:
    """在任务之间检查的取消标记，可以从任意线程调用 cancel()。"""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise BatchCancelledError("批处理已被取消")


# ========================================================================
# 3. 批处理管道
# ========================================================================

class BatchPipeline:
    """
    批量增强执行器。

    参数:
        parameter_set (ParameterSet | Mapping, optional): 参数集合或 "算子 -> 部分覆盖" 映射
        num_workers (int): 工作线程数，<=1 时顺序执行
        seed (int, optional): 设置后任务 i 使用 seed+i 作为随机种子，结果与调度顺序无关
        progress_sink (callable, optional): 接收 [0,100] 整数百分比
        cancel_token (CancellationToken, optional): 协作式取消标记
        show_progress (bool): 是否显示终端进度条
    """

    def __init__(
        self,
        parameter_set: ParameterSet | Mapping[str, Mapping[str, Any]] | None = None,
        num_workers: int = 1,
        seed: Optional[int] = None,
        progress_sink: Optional[ProgressSink] = None,
        cancel_token: Optional[CancellationToken] = None,
        show_progress: bool = False,
    ) -> None:
        if parameter_set is None or not isinstance(parameter_set, ParameterSet):
            parameter_set = ParameterSet(parameter_set)
        self.parameter_set = parameter_set
        self.num_workers = max(int(num_workers), 1)
        self.seed = seed
        self.progress_sink = progress_sink
        self.cancel_token = cancel_token or CancellationToken()
        self.show_progress = show_progress

    # ====================================================================
    # 3.1 主入口
    # ====================================================================

    @time_it
    def run(self, sources: Sequence[SourceItem], operator_ids: Sequence[str]) -> BatchResult:
        sources = list(sources)
        operator_ids = self._check_preconditions(sources, operator_ids)
        resolved = self._resolve_all(operator_ids)
        transforms = {op_id: get_transform(op_id) for op_id in operator_ids}

        logger.info("=" * 60)
        logger.info(f"批量增强开始: {len(sources)} 张图像 × {len(operator_ids)} 种算子".center(60))
        logger.info("=" * 60)

        decoded, skipped = self._decode_sources(sources)
        tasks = self._build_tasks(decoded, operator_ids, resolved)
        logger.info(f"有效任务数: {len(tasks)} (跳过图像: {len(skipped)})")

        with Progress(len(tasks), sink=self.progress_sink, show_bar=self.show_progress) as progress:
            if self.num_workers <= 1 or len(tasks) <= 1:
                entries = [self._run_task(task, transforms[task.operator_id], progress) for task in tasks]
            else:
                entries = self._run_parallel(tasks, transforms, progress)
            progress.finish()

        result = BatchResult(entries=entries, skipped_sources=skipped, operator_ids=list(operator_ids))
        logger.success(f"批量增强完成: {result.summary()}")
        return result

    # ====================================================================
    # 3.2 前置条件与参数解析
    # ====================================================================

    def _check_preconditions(self, sources: List[SourceItem], operator_ids: Sequence[str]) -> List[str]:
        if not sources:
            raise BatchPreconditionError("请提供至少一张图像")
        if not operator_ids:
            raise BatchPreconditionError("请选择至少一种增强算子")
        unknown = [op_id for op_id in operator_ids if op_id not in TRANSFORM_REGISTRY]
        if unknown:
            raise BatchPreconditionError(f"未注册的增强算子: {unknown}")

        unique = list(dict.fromkeys(operator_ids))
        if len(unique) != len(operator_ids):
            logger.warning(f"算子列表中存在重复项，已去重: {unique}")
        return unique

    def _resolve_all(self, operator_ids: Sequence[str]) -> Dict[str, Mapping[str, Any]]:
        try:
            return {op_id: self.parameter_set[op_id] for op_id in operator_ids}
        except (KeyError, ParameterError) as exc:
            raise BatchPreconditionError(f"算子参数解析失败: {exc}") from exc

    # ====================================================================
    # 3.3 解码与任务构建
    # ====================================================================

    def _decode_sources(self, sources: List[SourceItem]) -> Tuple[List[Tuple[str, Image]], List[str]]:
        decoded: List[Tuple[str, Image]] = []
        skipped: List[str] = []
        for item in sources:
            self.cancel_token.raise_if_cancelled()
            try:
                image = item.load()
            except ImageDecodeError as exc:
                logger.warning(f"图像解码失败，跳过 '{item.name}': {exc}")
                skipped.append(item.name)
                continue
            except Exception as exc:
                logger.exception(f"读取图像 '{item.name}' 时发生未知错误，跳过: {exc}")
                skipped.append(item.name)
                continue
            logger.debug(f"已解码 '{item.name}' ({image.width}x{image.height})")
            decoded.append((item.name, image))
        return decoded, skipped

    @staticmethod
    def _build_tasks(
        decoded: List[Tuple[str, Image]],
        operator_ids: Sequence[str],
        resolved: Mapping[str, Mapping[str, Any]],
    ) -> List[Task]:
        tasks: List[Task] = []
        for name, image in decoded:
            for op_id in operator_ids:
                tasks.append(Task(
                    index=len(tasks),
                    original_name=name,
                    source=image,
                    operator_id=op_id,
                    params=resolved[op_id],
                ))
        return tasks

    # ====================================================================
    # 3.4 任务执行
    # ====================================================================

    def _run_task(self, task: Task, transform: BaseTransform, progress: Progress) -> BatchEntry:
        self.cancel_token.raise_if_cancelled()
        task.state = TaskState.RUNNING
        generator = make_generator(None if self.seed is None else self.seed + task.index)

        error: Optional[str] = None
        try:
            output = transform.apply(task.source, task.params, generator)
            task.state = TaskState.COMPLETED
        except Exception as exc:
            # 任务边界: 退化为原图副本，保持算子标签不变
            logger.opt(exception=exc).warning(
                f"任务 '{task.operator_id}' @ '{task.original_name}' 失败，退化为原图: {exc}"
            )
            output = task.source.copy()
            error = f"{type(exc).__name__}: {exc}"
            task.state = TaskState.DEGRADED

        progress.advance(task.state.value)
        return BatchEntry(
            original_name=task.original_name,
            operator_id=task.operator_id,
            image=output,
            status=task.state,
            error=error,
        )

    def _run_parallel(
        self,
        tasks: List[Task],
        transforms: Mapping[str, BaseTransform],
        progress: Progress,
    ) -> List[BatchEntry]:
        logger.debug(f"使用 {self.num_workers} 个工作线程执行 {len(tasks)} 个任务")
        executor = ThreadPoolExecutor(max_workers=self.num_workers, thread_name_prefix="augkit")
        try:
            futures = [
                executor.submit(self._run_task, task, transforms[task.operator_id], progress)
                for task in tasks
            ]
            return [future.result() for future in futures]
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            executor.shutdown(wait=True)


def run_batch(
    sources: Sequence[SourceItem],
    operator_ids: Sequence[str],
    params: ParameterSet | Mapping[str, Mapping[str, Any]] | None = None,
    **kwargs: Any,
) -> BatchResult:
    """便捷函数: 构造 BatchPipeline 并执行一次。"""
    return BatchPipeline(parameter_set=params, **kwargs).run(sources, operator_ids)
