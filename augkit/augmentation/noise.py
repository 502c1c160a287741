#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-10 09:52:49
@author  : William_Trouvaille
@function: 噪声类数据增强操作
"""

from __future__ import annotations

from typing import Any, Mapping

import torch

from .base import BaseTransform, with_rgb

GAUSSIAN_AMPLITUDE = 25.0


# ========================================================================
# 1. 加性噪声与椒盐噪声
# ========================================================================

class Noise(BaseTransform):
    """
    噪声注入，mode 决定噪声类型:
        - gaussian: 每个像素采样一次 U(-25, 25)，同时加到 R、G、B 上
        - salt: 以 amount 的概率把像素置为白色
        - pepper: 以 amount 的概率把像素置为黑色
        - s&p: 独立采样盐、椒两个掩码，椒噪声后写入
    """

    op_id = "noise"
    display_name = "添加噪声"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        mode = params["mode"]
        amount = float(params["amount"])
        _, height, width = image.shape
        rgb = image[:3].clone()

        if mode == "gaussian":
            noise = (torch.rand((1, height, width), generator=generator) - 0.5) * (2.0 * GAUSSIAN_AMPLITUDE)
            return with_rgb(image, rgb + noise)

        if mode in ("salt", "s&p"):
            salt = torch.rand((height, width), generator=generator) < amount
            rgb[:, salt] = 255.0
        if mode in ("pepper", "s&p"):
            pepper = torch.rand((height, width), generator=generator) < amount
            rgb[:, pepper] = 0.0
        return with_rgb(image, rgb)
