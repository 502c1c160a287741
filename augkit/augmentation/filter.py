#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-10 09:52:49
@author  : William_Trouvaille
@function: 滤波相关的数据增强操作，包含高斯模糊、运动模糊与拉普拉斯边缘增强
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import torch
import torch.nn.functional as F
from loguru import logger

from .base import BaseTransform, with_rgb
from .params import normalize_range


# ========================================================================
# 1. 卷积工具
# ========================================================================

# --- 1.1 构建一维高斯核 ---
def gaussian_kernel(kernel_size: int, sigma: float, dtype: torch.dtype = torch.float32) -> torch.Tensor:
    radius = kernel_size // 2
    coords = torch.arange(-radius, radius + 1, dtype=dtype)
    kernel = torch.exp(-coords.pow(2) / (2 * sigma ** 2))
    return kernel / kernel.sum()


# --- 1.2 依据核大小推算 sigma（与 OpenCV 的默认规则一致） ---
def sigma_for_kernel(kernel_size: int) -> float:
    return 0.3 * ((kernel_size - 1) * 0.5 - 1) + 0.8


# --- 1.3 可分离卷积，边界使用复制填充 ---
def separable_filter(
    channels: torch.Tensor,
    kernel_y: Optional[torch.Tensor] = None,
    kernel_x: Optional[torch.Tensor] = None,
) -> torch.Tensor:
    """对 (C, H, W) 张量逐通道做可分离卷积，输出尺寸与输入相同。"""
    c = channels.shape[0]
    batch = channels.unsqueeze(0)
    if kernel_y is not None:
        k = kernel_y.numel()
        before = (k - 1) // 2
        batch = F.pad(batch, (0, 0, before, k - 1 - before), mode="replicate")
        weight = kernel_y.to(batch.dtype).view(1, 1, k, 1).expand(c, -1, -1, -1)
        batch = F.conv2d(batch, weight, groups=c)
    if kernel_x is not None:
        k = kernel_x.numel()
        before = (k - 1) // 2
        batch = F.pad(batch, (before, k - 1 - before, 0, 0), mode="replicate")
        weight = kernel_x.to(batch.dtype).view(1, 1, 1, k).expand(c, -1, -1, -1)
        batch = F.conv2d(batch, weight, groups=c)
    return batch.squeeze(0)


# ========================================================================
# 2. 高斯模糊
# ========================================================================

class GaussianBlur(BaseTransform):
    """核大小在 kernelRange 内按整数均匀采样并取奇数，sigma 由核大小推算。"""

    op_id = "blur"
    display_name = "高斯模糊"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        kernel_size = self._sample_kernel_size(params["kernelRange"], generator)
        if kernel_size <= 1:
            return image.clone()
        sigma = sigma_for_kernel(kernel_size)
        logger.debug(f"GaussianBlur kernel_size={kernel_size}, sigma={sigma:.4f}")
        kernel_1d = gaussian_kernel(kernel_size, sigma, image.dtype)
        return with_rgb(image, separable_filter(image[:3], kernel_1d, kernel_1d))

    @staticmethod
    def _sample_kernel_size(kernel_range, generator: torch.Generator) -> int:
        low, high = normalize_range(kernel_range)
        low, high = int(round(low)), int(round(high))
        size = int(torch.randint(low, high + 1, (1,), generator=generator).item())
        if size % 2 == 0:
            size += 1
        return size


# ========================================================================
# 3. 运动模糊
# ========================================================================

class MotionBlur(BaseTransform):
    """沿单一方向（水平或垂直）的一维均值核模糊。"""

    op_id = "motionBlur"
    display_name = "运动模糊"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        size = int(params["size"])
        if size <= 1:
            return image.clone()
        kernel = torch.full((size,), 1.0 / size, dtype=image.dtype)
        logger.debug(f"MotionBlur size={size}, direction={params['direction']}")
        if params["direction"] == "vertical":
            blurred = separable_filter(image[:3], kernel_y=kernel)
        else:
            blurred = separable_filter(image[:3], kernel_x=kernel)
        return with_rgb(image, blurred)


# ========================================================================
# 4. 拉普拉斯边缘增强
# ========================================================================

LAPLACIAN_KERNEL = torch.tensor([[0, -1, 0], [-1, 4, -1], [0, -1, 0]], dtype=torch.float32)


class EdgeEnhance(BaseTransform):
    """对内部像素做拉普拉斯卷积并按 strength 叠加到原图，边界像素不变。"""

    op_id = "edgeEnhance"
    display_name = "边缘增强"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        strength = float(params["strength"])
        _, height, width = image.shape
        if height < 3 or width < 3:
            return image.clone()

        rgb = image[:3]
        weight = LAPLACIAN_KERNEL.to(rgb.dtype).view(1, 1, 3, 3).expand(3, -1, -1, -1)
        response = F.conv2d(rgb.unsqueeze(0), weight, groups=3).squeeze(0)
        enhanced = rgb.clone()
        enhanced[:, 1:-1, 1:-1] = rgb[:, 1:-1, 1:-1] + strength * response
        return with_rgb(image, enhanced)
