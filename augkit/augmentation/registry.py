#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-10 09:52:49
@author  : William_Trouvaille
@function: 增强算子注册表与目录
@detail: 新增算子只需实现 BaseTransform 子类并加入注册表，无需修改任何分支逻辑。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Type

from ..errors import ParameterError
from .base import BaseTransform
from .color import Brightness, ColorJitter, Contrast, FancyPCA, HsvJitter, Intensity, RandomHsv
from .distortion import ElasticTransform, WaveNoise
from .filter import EdgeEnhance, GaussianBlur, MotionBlur
from .geometric import CenterCropResize, HorizontalFlip, PatchShuffle, Rotate, Scale, Translate, VerticalFlip
from .noise import Noise
from .occlusion import RandomErasing


# ========================================================================
# 1. 算子描述
# ========================================================================

@dataclass(frozen=True)
class OperatorDescriptor:
    id: str
    display_name: str
    has_parameters: bool


# ========================================================================
# 2. 变换注册表（顺序即目录展示顺序）
# ========================================================================

TRANSFORM_REGISTRY: Dict[str, Type[BaseTransform]] = {
    cls.op_id: cls
    for cls in [
        HorizontalFlip,
        VerticalFlip,
        Rotate,
        CenterCropResize,
        Noise,
        Brightness,
        Contrast,
        Scale,
        GaussianBlur,
        ColorJitter,
        MotionBlur,
        ElasticTransform,
        RandomErasing,
        Translate,
        WaveNoise,
        FancyPCA,
        HsvJitter,
        Intensity,
        EdgeEnhance,
        RandomHsv,
        PatchShuffle,
    ]
}

OPERATOR_CATALOG: List[OperatorDescriptor] = [
    OperatorDescriptor(id=op_id, display_name=cls.display_name, has_parameters=cls.has_parameters)
    for op_id, cls in TRANSFORM_REGISTRY.items()
]


def get_transform(op_id: str) -> BaseTransform:
    """按 id 实例化算子，未注册时抛出 ParameterError。"""
    if op_id not in TRANSFORM_REGISTRY:
        raise ParameterError(f"未注册的增强算子: {op_id!r}")
    return TRANSFORM_REGISTRY[op_id]()


def list_operators() -> List[OperatorDescriptor]:
    return list(OPERATOR_CATALOG)
