#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-10 09:52:49
@author  : William_Trouvaille
@function: 定义增强算子的基础抽象、随机数生成器与采样工具
"""

from __future__ import annotations

import abc
from typing import Any, Mapping, Sequence

import torch
from loguru import logger

from ..image import Image
from .params import normalize_range, resolve_params


# ========================================================================
# 1. 随机数生成与采样
# ========================================================================

# --- 1.1 显式注入的随机源 ---

def make_generator(seed: int | None = None) -> torch.Generator:
    """创建独立的 CPU 随机数生成器；seed 为 None 时使用系统熵初始化。"""
    generator = torch.Generator(device="cpu")
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(int(seed))
    return generator


# --- 1.2 区间采样 ---

def sample_uniform(low: float, high: float, generator: torch.Generator) -> float:
    """在 [low, high) 上均匀采样一个数，区间颠倒时自动纠正。"""
    low, high = normalize_range((low, high))
    u = torch.rand(1, generator=generator).item()
    return low + u * (high - low)


def sample_range(value: Sequence[float], generator: torch.Generator) -> float:
    low, high = normalize_range(value)
    return sample_uniform(low, high, generator)


def midpoint(value: Sequence[float]) -> float:
    low, high = normalize_range(value)
    return (low + high) / 2.0


# ========================================================================
# 2. 统一的变换抽象
# ========================================================================

class BaseTransform(metaclass=abc.ABCMeta):
    """
    所有增强算子的抽象基类。

    子类只需实现 `_apply`，在 (4, H, W) 的 float32 工作副本上计算，
    取值范围为 [0, 255]。基类负责复制输入、裁剪取值、取整回 uint8，
    并保证输出尺寸与输入一致。
    """

    op_id: str = ""
    display_name: str = ""
    has_parameters: bool = True

    # ====================================================================
    # 2.1 调用入口
    # ====================================================================

    def apply(
        self,
        image: Image,
        params: Mapping[str, Any] | None = None,
        generator: torch.Generator | None = None,
    ) -> Image:
        """对图像执行变换并返回新图像；参数缺省时使用默认配置。"""
        if not isinstance(image, Image):
            raise TypeError(f"输入必须是 Image，实际为 {type(image).__name__}")
        resolved = resolve_params(self.op_id, params)
        if generator is None:
            generator = make_generator()

        working = image.pixels.permute(2, 0, 1).to(torch.float32)
        logger.debug(f"执行变换 '{self.op_id}' ({image.width}x{image.height}), 参数={dict(resolved)}")
        output = self._apply(working, resolved, generator)
        return self._to_image(output, image)

    def __call__(self, image: Image, params: Mapping[str, Any] | None = None,
                 generator: torch.Generator | None = None) -> Image:
        return self.apply(image, params, generator)

    # ====================================================================
    # 2.2 输出收尾
    # ====================================================================

    def _to_image(self, output: torch.Tensor, source: Image) -> Image:
        expected = (4, source.height, source.width)
        if tuple(output.shape) != expected:
            raise RuntimeError(f"变换 {self.op_id} 改变了图像尺寸: {tuple(output.shape)} != {expected}")
        if not bool(torch.isfinite(output).all()):
            raise FloatingPointError(f"变换 {self.op_id} 产生了非有限像素值")
        pixels = torch.round(torch.clamp(output, 0.0, 255.0)).to(torch.uint8)
        return Image(width=source.width, height=source.height, pixels=pixels.permute(1, 2, 0).contiguous())

    # ====================================================================
    # 2.3 子类需实现的核心逻辑
    # ====================================================================

    @abc.abstractmethod
    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        """子类实现具体变换，输入输出形状固定为 (4, H, W)，取值 [0, 255]。"""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(op_id={self.op_id!r})"


# ========================================================================
# 3. 常用通道工具
# ========================================================================

def with_rgb(image: torch.Tensor, rgb: torch.Tensor) -> torch.Tensor:
    """用新的 RGB 通道替换原图 RGB，保留 alpha 通道。"""
    return torch.cat([torch.clamp(rgb, 0.0, 255.0), image[3:4]], dim=0)
