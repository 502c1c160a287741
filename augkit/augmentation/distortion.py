#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-19 09:21:36
@author  : William_Trouvaille
@function: 像素位移类数据增强操作，包含正弦波浪扭曲与弹性形变
"""

from __future__ import annotations

import math
from typing import Any, Mapping

import torch
import torch.nn.functional as F
from loguru import logger

from .base import BaseTransform, with_rgb
from .filter import gaussian_kernel, separable_filter


# ========================================================================
# 1. 波浪扭曲
# ========================================================================

class WaveNoise(BaseTransform):
    """
    逐像素正弦位移: 目标像素 (x, y) 取源图
    (x + floor(A·sin(2πf·y)), y + floor(A·sin(2πf·x)))，越界坐标截断到边缘。
    """

    op_id = "waveNoise"
    display_name = "波浪噪声"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        amplitude = float(params["amplitude"])
        frequency = float(params["frequency"])
        _, height, width = image.shape

        ys = torch.arange(height, dtype=torch.float64)
        xs = torch.arange(width, dtype=torch.float64)
        offset_x = torch.floor(amplitude * torch.sin(2 * math.pi * frequency * ys)).long()
        offset_y = torch.floor(amplitude * torch.sin(2 * math.pi * frequency * xs)).long()

        src_x = (xs.long().view(1, width) + offset_x.view(height, 1)).clamp(0, width - 1)
        src_y = (ys.long().view(height, 1) + offset_y.view(1, width)).clamp(0, height - 1)
        return with_rgb(image, image[:3, src_y, src_x])


# ========================================================================
# 2. 弹性形变
# ========================================================================

class ElasticTransform(BaseTransform):
    """Simard 式弹性形变: 均匀随机位移场经高斯平滑 (sigma) 后乘以 alpha，再双线性重采样。"""

    op_id = "elastic"
    display_name = "弹性变形"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        alpha = float(params["alpha"])
        sigma = float(params["sigma"])
        _, height, width = image.shape

        field = torch.rand((2, height, width), generator=generator) * 2.0 - 1.0
        if sigma > 0:
            kernel_size = 2 * int(math.ceil(3 * sigma)) + 1
            kernel = gaussian_kernel(kernel_size, sigma)
            field = separable_filter(field, kernel, kernel)
        field = field * alpha
        logger.debug(f"弹性形变: alpha={alpha}, sigma={sigma}, 最大位移={field.abs().max().item():.3f}px")

        ys = torch.arange(height, dtype=torch.float32).view(height, 1)
        xs = torch.arange(width, dtype=torch.float32).view(1, width)
        sample_x = xs + field[0]
        sample_y = ys + field[1]
        grid_x = 2.0 * sample_x / max(width - 1, 1) - 1.0
        grid_y = 2.0 * sample_y / max(height - 1, 1) - 1.0
        grid = torch.stack([grid_x, grid_y], dim=-1).unsqueeze(0)

        warped = F.grid_sample(
            image.unsqueeze(0),
            grid,
            mode="bilinear",
            padding_mode="border",
            align_corners=True,
        )
        return warped.squeeze(0)
