#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-19 16:40:27
@author  : William_Trouvaille
@function: 增强结果打包
@detail:
    - 按算子分组: 每个算子一个目录，目录顺序为首次出现顺序
    - 文件名为 "{算子ID}_{原始文件名}"，目录内保持任务顺序
    - 归档文件名为 augmented_images_{YYYY-MM-DD}.zip（UTC 日期）
    - 归档写入器通过 is_ready() 声明可用性，不可用时返回 NOT_READY 而不是抛出异常
"""

from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
from enum import Enum
import io
import os
from typing import Dict, Iterable, List, Optional, Protocol
import zipfile

from loguru import logger

from .batch import BatchEntry, BatchResult
from .errors import ArchiveBuildError
from .helpers import format_size

ARCHIVE_PREFIX = "augmented_images"


# ========================================================================
# 1. 数据结构
# ========================================================================

@dataclass(frozen=True)
class ArchiveEntry:
    filename: str
    data: bytes


class PackageStatus(str, Enum):
    OK = "ok"
    NOT_READY = "not_ready"


@dataclass(frozen=True)
class PackageResult:
    status: PackageStatus
    filename: Optional[str] = None
    data: Optional[bytes] = None

    @property
    def ok(self) -> bool:
        return self.status is PackageStatus.OK


# ========================================================================
# 2. 归档写入器
# ========================================================================

class ArchiveWriter(Protocol):
    """归档能力接口: groups 为 "目录名 -> 有序文件列表"。"""

    def is_ready(self) -> bool:
        ...

    def build(self, groups: Dict[str, List[ArchiveEntry]]) -> bytes:
        ...


class ZipArchiveWriter:
    """基于 zipfile 的默认写入器，总是可用。"""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED):
        self.compression = compression

    def is_ready(self) -> bool:
        return True

    def build(self, groups: Dict[str, List[ArchiveEntry]]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, mode="w", compression=self.compression) as archive:
            for folder, entries in groups.items():
                for entry in entries:
                    archive.writestr(f"{folder}/{entry.filename}", entry.data)
        return buffer.getvalue()


# ========================================================================
# 3. 分组与命名
# ========================================================================

def output_filename(entry: BatchEntry) -> str:
    return f"{entry.operator_id}_{entry.original_name}"


def group_results(
        entries: Iterable[BatchEntry],
        fmt: str = "JPEG",
        quality: int = 95
) -> Dict[str, List[ArchiveEntry]]:
    """
    把批处理结果按算子分组并编码。

    同一目录下出现重名文件时（不同来源同名），后出现者追加 "_1"、"_2" 等后缀。
    """
    groups: Dict[str, List[ArchiveEntry]] = {}
    seen: Dict[str, set] = {}
    for entry in entries:
        folder = entry.operator_id
        names = seen.setdefault(folder, set())
        filename = _unique_name(output_filename(entry), names)
        names.add(filename)
        groups.setdefault(folder, []).append(
            ArchiveEntry(filename=filename, data=entry.image.encode(fmt=fmt, quality=quality))
        )
    return groups


def _unique_name(filename: str, taken: set) -> str:
    if filename not in taken:
        return filename
    stem, ext = os.path.splitext(filename)
    counter = 1
    while f"{stem}_{counter}{ext}" in taken:
        counter += 1
    return f"{stem}_{counter}{ext}"


def archive_filename(date: Optional[dt.date] = None) -> str:
    if date is None:
        date = dt.datetime.now(dt.timezone.utc).date()
    return f"{ARCHIVE_PREFIX}_{date.isoformat()}.zip"


# ========================================================================
# 4. 打包器
# ========================================================================

class OutputPackager:
    """
    把 BatchResult 打包为单个归档。

    参数:
        fmt (str): 输出图像编码格式，默认 JPEG
        quality (int): JPEG/WEBP 编码质量
    """

    def __init__(self, fmt: str = "JPEG", quality: int = 95):
        self.fmt = fmt
        self.quality = quality

    def package(
            self,
            result: BatchResult,
            writer: Optional[ArchiveWriter] = None,
            date: Optional[dt.date] = None
    ) -> PackageResult:
        writer = writer if writer is not None else ZipArchiveWriter()
        if not writer.is_ready():
            logger.warning("归档写入器尚未就绪，跳过打包")
            return PackageResult(status=PackageStatus.NOT_READY)

        try:
            groups = group_results(result, fmt=self.fmt, quality=self.quality)
            data = writer.build(groups)
        except Exception as e:
            raise ArchiveBuildError(f"构建归档失败: {e}") from e

        filename = archive_filename(date)
        file_count = sum(len(entries) for entries in groups.values())
        logger.success(f"归档 '{filename}' 构建完成: {len(groups)} 个目录, {file_count} 个文件, {format_size(len(data))}")
        return PackageResult(status=PackageStatus.OK, filename=filename, data=data)

    @staticmethod
    def save(package: PackageResult, output_dir: str) -> str:
        """把归档写入 output_dir 并返回完整路径。"""
        if not package.ok or package.data is None or package.filename is None:
            raise ArchiveBuildError(f"无法保存状态为 {package.status.value} 的归档")
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, package.filename)
        with open(path, "wb") as f:
            f.write(package.data)
        logger.info(f"归档已保存到: {path}")
        return path
