#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-10 09:52:49
@author  : William_Trouvaille
@function: 颜色空间相关的数据增强操作，涵盖亮度、对比度、强度、颜色抖动、Fancy PCA 与 HSV 扰动
@detail: 所有颜色类算子只修改 RGB 通道，alpha 通道保持不变。
"""

from __future__ import annotations

from typing import Any, Mapping

import torch
from loguru import logger

from .base import BaseTransform, midpoint, sample_range, sample_uniform, with_rgb
from .colorspace import hsv_to_rgb_tensor, rgb_to_hsv_tensor


# ========================================================================
# 1. 亮度、对比度与强度
# ========================================================================

def _scale_rgb(image: torch.Tensor, factor: float) -> torch.Tensor:
    return with_rgb(image, image[:3] * factor)


def _stretch_rgb(image: torch.Tensor, factor: float) -> torch.Tensor:
    """以 128 为中心的线性对比度拉伸。"""
    return with_rgb(image, image[:3] * factor + 128.0 * (1.0 - factor))


class Brightness(BaseTransform):
    """亮度调整，因子取区间中点: v' = clamp(v * factor)。"""

    op_id = "brightness"
    display_name = "亮度调整"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        factor = midpoint(params["factorRange"])
        logger.debug(f"亮度因子: {factor:.4f}")
        return _scale_rgb(image, factor)


class Contrast(BaseTransform):
    """对比度调整，因子取区间中点: v' = clamp(v*f + 128*(1-f))。"""

    op_id = "contrast"
    display_name = "对比度调整"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        factor = midpoint(params["factorRange"])
        logger.debug(f"对比度因子: {factor:.4f}")
        return _stretch_rgb(image, factor)


class Intensity(BaseTransform):
    """强度调整，与亮度公式相同，但因子在区间内按任务随机采样。"""

    op_id = "intensity"
    display_name = "强度调整"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        factor = sample_range(params["factor"], generator)
        logger.debug(f"强度因子: {factor:.4f}")
        return _scale_rgb(image, factor)


# ========================================================================
# 2. 组合颜色扰动
# ========================================================================

class ColorJitter(BaseTransform):
    """
    依次施加随机亮度与对比度扰动，因子为 1 + U(-1,1) * 幅度。

    饱和度因子会被采样以保留随机序列，但暂不作用于图像。
    """

    op_id = "colorJitter"
    display_name = "色彩抖动"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        brightness = 1.0 + sample_uniform(-1.0, 1.0, generator) * params["brightness"]
        contrast = 1.0 + sample_uniform(-1.0, 1.0, generator) * params["contrast"]
        saturation = 1.0 + sample_uniform(-1.0, 1.0, generator) * params["saturation"]
        logger.debug(f"颜色扰动因子: brightness={brightness:.4f}, contrast={contrast:.4f}, saturation={saturation:.4f}")

        image = _scale_rgb(image, brightness)
        return _stretch_rgb(image, contrast)


# ========================================================================
# 3. Fancy PCA
# ========================================================================

# ImageNet RGB 协方差的特征值与特征向量（每行一个特征向量）
PCA_EIGENVALUES = torch.tensor([0.2175, 0.0188, 0.0045], dtype=torch.float32)
PCA_EIGENVECTORS = torch.tensor(
    [
        [0.5, 0.5, 0.5],
        [0.3, 0.3, -0.6],
        [0.2, -0.2, 0.1],
    ],
    dtype=torch.float32,
)


class FancyPCA(BaseTransform):
    """AlexNet 风格的 PCA 颜色增强，对全图叠加同一个 RGB 偏移。"""

    op_id = "fancyPca"
    display_name = "Fancy PCA"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        std = float(params["alphaStd"])
        alpha = (torch.rand(3, generator=generator) * 2.0 - 1.0) * std
        noise = (PCA_EIGENVECTORS * (PCA_EIGENVALUES * alpha).unsqueeze(1)).sum(dim=0)
        logger.debug(f"Fancy PCA alpha={alpha.tolist()}, RGB偏移={(noise * 255.0).tolist()}")
        return with_rgb(image, image[:3] + (noise * 255.0).view(3, 1, 1))


# ========================================================================
# 4. HSV 空间扰动
# ========================================================================

def _apply_hsv(image: torch.Tensor, hsv_fn) -> torch.Tensor:
    hsv = rgb_to_hsv_tensor(image[:3] / 255.0)
    h, s, v = hsv_fn(hsv[0], hsv[1], hsv[2])
    rgb = hsv_to_rgb_tensor(torch.stack([h, s.clamp(0.0, 1.0), v.clamp(0.0, 1.0)], dim=0))
    return with_rgb(image, rgb * 255.0)


class HsvJitter(BaseTransform):
    """色调固定偏移（模 360），饱和度与明度各自按一次采样的比例缩放。"""

    op_id = "hsvJitter"
    display_name = "HSV抖动"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        h_shift = float(params["hShift"])
        s_scale = sample_range(params["sScale"], generator)
        v_scale = sample_range(params["vScale"], generator)
        logger.debug(f"HSV抖动: hShift={h_shift}, sScale={s_scale:.4f}, vScale={v_scale:.4f}")
        return _apply_hsv(
            image,
            lambda h, s, v: (torch.remainder(h + h_shift, 360.0), s * s_scale, v * v_scale),
        )


class RandomHsv(BaseTransform):
    """色调乘以采样比例并以 180° 归一化取模，饱和度与明度按采样比例缩放。"""

    op_id = "randomHsv"
    display_name = "随机HSV"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        h_scale = sample_range(params["hRange"], generator)
        s_scale = sample_range(params["sRange"], generator)
        v_scale = sample_range(params["vRange"], generator)
        logger.debug(f"随机HSV: hScale={h_scale:.4f}, sScale={s_scale:.4f}, vScale={v_scale:.4f}")
        return _apply_hsv(
            image,
            lambda h, s, v: (torch.remainder(h * h_scale / 180.0, 180.0), s * s_scale, v * v_scale),
        )
