#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-20 15:02:44
@author  : William_Trouvaille
@function: 测试公共夹具，所有图像都在内存中构造
"""

import pytest
import torch

from augkit import Image, SourceItem
from augkit.augmentation import make_generator


def gradient_image(width: int = 32, height: int = 24, alpha: int = 255) -> Image:
    """R 沿 x 变化，G 沿 y 变化，B 为棋盘格，便于检测位移与打乱。"""
    xs = torch.arange(width).view(1, width).expand(height, width)
    ys = torch.arange(height).view(height, 1).expand(height, width)
    r = (xs * 255 // max(width - 1, 1)).to(torch.uint8)
    g = (ys * 255 // max(height - 1, 1)).to(torch.uint8)
    b = (((xs // 4 + ys // 4) % 2) * 200 + 20).to(torch.uint8)
    a = torch.full((height, width), alpha, dtype=torch.uint8)
    return Image.from_tensor(torch.stack([r, g, b, a], dim=-1))


@pytest.fixture
def generator() -> torch.Generator:
    return make_generator(1234)


@pytest.fixture
def gradient() -> Image:
    return gradient_image()


@pytest.fixture
def solid_gray() -> Image:
    return Image.solid(8, 6, (100, 100, 100, 255))


@pytest.fixture
def two_sources():
    return [
        SourceItem.from_image("a.png", gradient_image(16, 12)),
        SourceItem.from_image("b.png", Image.solid(10, 10, (255, 0, 0, 255))),
    ]
