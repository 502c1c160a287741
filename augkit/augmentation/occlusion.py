#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-10 09:52:49
@author  : William_Trouvaille
@function: 遮挡类数据增强操作：随机擦除
"""

from __future__ import annotations

import math
from typing import Any, Mapping

import torch
from loguru import logger

from .base import BaseTransform, sample_uniform

OPAQUE_BLACK = torch.tensor([0.0, 0.0, 0.0, 255.0]).view(4, 1, 1)


# ========================================================================
# 1. 随机擦除
# ========================================================================

class RandomErasing(BaseTransform):
    """
    以概率 p 用不透明黑色矩形遮挡图像。

    面积占比取 U(sl, sh)，宽高比取 U(r1, 1/r1)，高 = sqrt(面积*宽高比)，宽 = 面积/高；
    只有矩形能放进画布时才执行擦除，否则原样返回。
    """

    op_id = "erase"
    display_name = "随机擦除"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        output = image.clone()
        if torch.rand(1, generator=generator).item() >= params["p"]:
            return output

        r1 = float(params["r1"])
        if r1 <= 0:
            raise ValueError(f"r1 必须大于0，实际为 {r1}")
        _, height, width = image.shape
        area = height * width * sample_uniform(params["sl"], params["sh"], generator)
        aspect_ratio = sample_uniform(r1, 1.0 / r1, generator)
        erase_h = math.sqrt(area * aspect_ratio)
        erase_w = area / erase_h if erase_h > 0 else 0.0

        if not (0 < erase_h < height and 0 < erase_w < width):
            logger.debug(f"擦除区域 ({erase_h:.1f}x{erase_w:.1f}) 超出画布，跳过")
            return output

        left = sample_uniform(0.0, width - erase_w, generator)
        top = sample_uniform(0.0, height - erase_h, generator)
        x0, x1 = int(round(left)), int(round(left + erase_w))
        y0, y1 = int(round(top)), int(round(top + erase_h))
        logger.debug(f"随机擦除区域: x=[{x0},{x1}), y=[{y0},{y1})")
        output[:, y0:y1, x0:x1] = OPAQUE_BLACK
        return output
