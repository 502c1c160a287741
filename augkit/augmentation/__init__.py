#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-10 09:52:49
@author  : William_Trouvaille
@function: 数据增强子工具箱统一导出入口
"""

from .base import BaseTransform, make_generator, midpoint, sample_range, sample_uniform
from .color import Brightness, ColorJitter, Contrast, FancyPCA, HsvJitter, Intensity, RandomHsv
from .colorspace import hsv_to_rgb, hsv_to_rgb_tensor, rgb_to_hsv, rgb_to_hsv_tensor
from .distortion import ElasticTransform, WaveNoise
from .filter import EdgeEnhance, GaussianBlur, MotionBlur
from .geometric import CenterCropResize, HorizontalFlip, PatchShuffle, Rotate, Scale, Translate, VerticalFlip
from .noise import Noise
from .occlusion import RandomErasing
from .params import (
    OPERATOR_PARAMS,
    ParameterSet,
    ParamField,
    clamp_to_bounds,
    default_params,
    normalize_range,
    resolve_params,
)
from .registry import OPERATOR_CATALOG, TRANSFORM_REGISTRY, OperatorDescriptor, get_transform, list_operators

__all__ = [
    "BaseTransform",
    "make_generator",
    "midpoint",
    "sample_range",
    "sample_uniform",
    "rgb_to_hsv",
    "hsv_to_rgb",
    "rgb_to_hsv_tensor",
    "hsv_to_rgb_tensor",
    "HorizontalFlip",
    "VerticalFlip",
    "Rotate",
    "CenterCropResize",
    "Translate",
    "Scale",
    "PatchShuffle",
    "Brightness",
    "Contrast",
    "Intensity",
    "ColorJitter",
    "FancyPCA",
    "HsvJitter",
    "RandomHsv",
    "Noise",
    "WaveNoise",
    "ElasticTransform",
    "GaussianBlur",
    "MotionBlur",
    "EdgeEnhance",
    "RandomErasing",
    "OPERATOR_PARAMS",
    "ParameterSet",
    "ParamField",
    "clamp_to_bounds",
    "default_params",
    "normalize_range",
    "resolve_params",
    "OPERATOR_CATALOG",
    "TRANSFORM_REGISTRY",
    "OperatorDescriptor",
    "get_transform",
    "list_operators",
]
