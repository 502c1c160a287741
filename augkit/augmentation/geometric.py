#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-10 09:52:49
@author  : William_Trouvaille
@function: 几何类数据增强操作的实现，包含翻转、旋转、裁剪、平移、缩放与分块打乱
@detail: 所有几何变换都在原始画布尺寸内完成，超出源图像的区域填充为透明。
"""

from __future__ import annotations

from typing import Any, Mapping

import torch
from loguru import logger
from torchvision.transforms import InterpolationMode
from torchvision.transforms import functional as TF

from .base import BaseTransform, midpoint, sample_range

TRANSPARENT = [0.0, 0.0, 0.0, 0.0]


# ========================================================================
# 1. 翻转
# ========================================================================

class HorizontalFlip(BaseTransform):
    """水平翻转。"""

    op_id = "hflip"
    display_name = "水平翻转"
    has_parameters = False

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        return torch.flip(image, dims=(-1,))


class VerticalFlip(BaseTransform):
    """垂直翻转。"""

    op_id = "vflip"
    display_name = "垂直翻转"
    has_parameters = False

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        return torch.flip(image, dims=(-2,))


# ========================================================================
# 2. 绕中心旋转
# ========================================================================

class Rotate(BaseTransform):
    """按角度区间的中点旋转（屏幕坐标下顺时针为正），画布尺寸不变。"""

    op_id = "rotate"
    display_name = "旋转"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        angle = midpoint(params["angleRange"])
        if angle % 360.0 == 0.0:
            return image.clone()
        logger.debug(f"旋转角度: {angle:.2f}°")
        # torchvision 以逆时针为正
        return TF.rotate(
            image,
            angle=-angle,
            interpolation=InterpolationMode.BILINEAR,
            expand=False,
            fill=TRANSPARENT,
        )


# ========================================================================
# 3. 中心裁剪并缩放回原尺寸
# ========================================================================

class CenterCropResize(BaseTransform):
    """裁剪边长为 min(w,h)*ratio 的中心正方形，再缩放回原始宽高。"""

    op_id = "crop"
    display_name = "随机裁剪"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        _, height, width = image.shape
        crop_size = max(int(round(min(height, width) * params["ratio"])), 1)
        top = int(round((height - crop_size) / 2))
        left = int(round((width - crop_size) / 2))
        logger.debug(f"中心裁剪参数: top={top}, left={left}, size={crop_size}, 原始尺寸=({height},{width})")
        return TF.resized_crop(
            image,
            top=top,
            left=left,
            height=crop_size,
            width=crop_size,
            size=[height, width],
            interpolation=InterpolationMode.BILINEAR,
            antialias=True,
        )


# ========================================================================
# 4. 平移
# ========================================================================

class Translate(BaseTransform):
    """两个轴分别从区间中独立采样整像素偏移，空出的区域保持透明。"""

    op_id = "translate"
    display_name = "平移"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        _, height, width = image.shape
        dx = int(round(sample_range(params["range"], generator)))
        dy = int(round(sample_range(params["range"], generator)))
        logger.debug(f"平移偏移: dx={dx}, dy={dy}")

        output = torch.zeros_like(image)
        span_w = width - abs(dx)
        span_h = height - abs(dy)
        if span_w <= 0 or span_h <= 0:
            return output
        src_x, dst_x = max(-dx, 0), max(dx, 0)
        src_y, dst_y = max(-dy, 0), max(dy, 0)
        output[:, dst_y:dst_y + span_h, dst_x:dst_x + span_w] = image[:, src_y:src_y + span_h, src_x:src_x + span_w]
        return output


# ========================================================================
# 5. 缩放
# ========================================================================

class Scale(BaseTransform):
    """以画布中心为原点缩放，输出仍为原尺寸；缩小时四周透明。"""

    op_id = "scale"
    display_name = "随机缩放"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        factor = sample_range(params["range"], generator)
        if factor <= 0:
            raise ValueError(f"缩放因子必须大于0，实际为 {factor}")
        logger.debug(f"缩放因子: {factor:.4f}")
        if factor == 1.0:
            return image.clone()
        return TF.affine(
            image,
            angle=0.0,
            translate=[0, 0],
            scale=factor,
            shear=[0.0, 0.0],
            interpolation=InterpolationMode.BILINEAR,
            fill=TRANSPARENT,
        )


# ========================================================================
# 6. 分块打乱
# ========================================================================

class PatchShuffle(BaseTransform):
    """
    把画布划分为 gridSize x gridSize 像素的块（不足一块的尾部行列保持不变），
    对所有完整块做均匀随机排列后按顺序放回网格。
    """

    op_id = "patchShuffle"
    display_name = "Patch Shuffle"

    def _apply(self, image: torch.Tensor, params: Mapping[str, Any], generator: torch.Generator) -> torch.Tensor:
        size = int(params["gridSize"])
        if size <= 0:
            raise ValueError(f"gridSize 必须大于0，实际为 {size}")
        channels, height, width = image.shape
        rows, cols = height // size, width // size
        if rows == 0 or cols == 0:
            logger.debug(f"图像 ({height},{width}) 小于块大小 {size}，跳过打乱")
            return image.clone()

        region = image[:, :rows * size, :cols * size]
        # (C, rows, size, cols, size) -> (rows*cols, C, size, size)
        blocks = region.reshape(channels, rows, size, cols, size).permute(1, 3, 0, 2, 4).reshape(-1, channels, size, size)
        order = torch.randperm(blocks.shape[0], generator=generator)
        shuffled = blocks[order]
        restored = shuffled.reshape(rows, cols, channels, size, size).permute(2, 0, 3, 1, 4).reshape(
            channels, rows * size, cols * size
        )

        output = image.clone()
        output[:, :rows * size, :cols * size] = restored
        return output
