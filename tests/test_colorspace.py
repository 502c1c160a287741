#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-20 15:10:03
@author  : William_Trouvaille
@function: RGB/HSV 转换测试
"""

import pytest
import torch

from augkit.augmentation import hsv_to_rgb, hsv_to_rgb_tensor, rgb_to_hsv, rgb_to_hsv_tensor


@pytest.mark.parametrize(
    "rgb, expected",
    [
        ((1.0, 0.0, 0.0), (0.0, 1.0, 1.0)),
        ((0.0, 1.0, 0.0), (120.0, 1.0, 1.0)),
        ((0.0, 0.0, 1.0), (240.0, 1.0, 1.0)),
        ((0.5, 0.5, 0.5), (0.0, 0.0, 0.5)),
        ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
    ],
)
def test_rgb_to_hsv_primaries(rgb, expected):
    assert rgb_to_hsv(*rgb) == pytest.approx(expected)


def test_magenta_hue_wraps_below_360():
    h, s, v = rgb_to_hsv(1.0, 0.0, 0.5)
    assert 300.0 < h < 360.0
    assert s == pytest.approx(1.0)
    assert v == pytest.approx(1.0)


@pytest.mark.parametrize("rgb", [(0.2, 0.4, 0.6), (0.9, 0.1, 0.3), (0.3, 0.8, 0.2), (0.7, 0.7, 0.1)])
def test_scalar_round_trip(rgb):
    assert hsv_to_rgb(*rgb_to_hsv(*rgb)) == pytest.approx(rgb, abs=1e-9)


def test_tensor_conversion_matches_scalar():
    generator = torch.Generator().manual_seed(0)
    rgb = torch.rand((3, 5, 7), generator=generator, dtype=torch.float64)
    hsv = rgb_to_hsv_tensor(rgb)
    for y in range(5):
        for x in range(7):
            expected = rgb_to_hsv(*rgb[:, y, x].tolist())
            assert hsv[:, y, x].tolist() == pytest.approx(expected, abs=1e-9)

    assert torch.allclose(hsv_to_rgb_tensor(hsv), rgb, atol=1e-9)


def test_tensor_hsv_to_rgb_handles_hue_beyond_360():
    hsv = torch.tensor([[[360.0 + 120.0]], [[1.0]], [[1.0]]])
    rgb = hsv_to_rgb_tensor(hsv)
    assert rgb.flatten().tolist() == pytest.approx([0.0, 1.0, 0.0], abs=1e-6)
