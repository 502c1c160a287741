#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-18 11:03:27
@author  : William_Trouvaille
@function: RGB 与 HSV 之间的颜色空间转换
@detail:
    - rgb_to_hsv / hsv_to_rgb: 标量版本，输入输出均为归一化通道值
    - rgb_to_hsv_tensor / hsv_to_rgb_tensor: 向量化版本，作用于 (3, H, W) 浮点张量
    约定: r,g,b ∈ [0,1]，h ∈ [0,360)，s,v ∈ [0,1]；max == min 时色调定义为 0。
"""

from __future__ import annotations

import math
from typing import Tuple

import torch


# ========================================================================
# 1. 标量转换
# ========================================================================

def rgb_to_hsv(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """RGB([0,1]) -> HSV(h∈[0,360), s,v∈[0,1])。"""
    max_c = max(r, g, b)
    min_c = min(r, g, b)
    delta = max_c - min_c

    v = max_c
    s = 0.0 if max_c == 0 else delta / max_c

    if delta == 0:
        h = 0.0
    elif max_c == r:
        h = (g - b) / delta + (6.0 if g < b else 0.0)
    elif max_c == g:
        h = (b - r) / delta + 2.0
    else:
        h = (r - g) / delta + 4.0

    h *= 60.0
    return h, s, v


def hsv_to_rgb(h: float, s: float, v: float) -> Tuple[float, float, float]:
    """HSV -> RGB([0,1])，按 60° 扇区分段计算。"""
    sector = math.floor(h / 60.0)
    f = h / 60.0 - sector
    i = int(sector) % 6
    p = v * (1 - s)
    q = v * (1 - f * s)
    t = v * (1 - (1 - f) * s)

    if i == 0:
        return v, t, p
    if i == 1:
        return q, v, p
    if i == 2:
        return p, v, t
    if i == 3:
        return p, q, v
    if i == 4:
        return t, p, v
    return v, p, q


# ========================================================================
# 2. 张量转换
# ========================================================================

def rgb_to_hsv_tensor(rgb: torch.Tensor) -> torch.Tensor:
    """
    向量化的 RGB -> HSV。

    参数:
        rgb (torch.Tensor): 形状 (3, H, W)，取值 [0,1]

    返回:
        torch.Tensor: 形状 (3, H, W)，依次为 h(度)、s、v
    """
    r, g, b = rgb[0], rgb[1], rgb[2]
    max_c, _ = rgb.max(dim=0)
    min_c, _ = rgb.min(dim=0)
    delta = max_c - min_c

    v = max_c
    s = torch.where(max_c > 0, delta / max_c.clamp_min(1e-12), torch.zeros_like(max_c))

    safe_delta = torch.where(delta > 0, delta, torch.ones_like(delta))
    hue_r = (g - b) / safe_delta + torch.where(g < b, torch.full_like(g, 6.0), torch.zeros_like(g))
    hue_g = (b - r) / safe_delta + 2.0
    hue_b = (r - g) / safe_delta + 4.0

    # 与标量版本一致的分支优先级: r > g > b
    h = torch.where(max_c == r, hue_r, torch.where(max_c == g, hue_g, hue_b))
    h = torch.where(delta > 0, h, torch.zeros_like(h)) * 60.0
    return torch.stack([h, s, v], dim=0)


def hsv_to_rgb_tensor(hsv: torch.Tensor) -> torch.Tensor:
    """
    向量化的 HSV -> RGB。

    参数:
        hsv (torch.Tensor): 形状 (3, H, W)，h 以度为单位

    返回:
        torch.Tensor: 形状 (3, H, W)，取值 [0,1]
    """
    h, s, v = hsv[0], hsv[1], hsv[2]
    sector = torch.floor(h / 60.0)
    f = h / 60.0 - sector
    i = torch.remainder(sector, 6).long()
    p = v * (1 - s)
    q = v * (1 - f * s)
    t = v * (1 - (1 - f) * s)

    # 每个扇区对应的 (r, g, b) 组合
    candidates_r = torch.stack([v, q, p, p, t, v], dim=0)
    candidates_g = torch.stack([t, v, v, q, p, p], dim=0)
    candidates_b = torch.stack([p, p, t, v, v, q], dim=0)
    index = i.unsqueeze(0)
    r = torch.gather(candidates_r, 0, index).squeeze(0)
    g = torch.gather(candidates_g, 0, index).squeeze(0)
    b = torch.gather(candidates_b, 0, index).squeeze(0)
    return torch.stack([r, g, b], dim=0)
