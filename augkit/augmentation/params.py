#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-18 13:40:02
@author  : William_Trouvaille
@function: 算子参数模型
@detail:
    - ParamField: 单个参数字段的类型、默认值、界面取值范围与枚举
    - OPERATOR_PARAMS: 每个算子的参数字段表（注册表模式）
    - resolve_params: 将用户的部分覆盖与默认值合并为完整配置（纯函数，不修改输入）
    - ParameterSet: 不可变的 "算子 id -> 配置" 映射，更新时返回新对象
    校验策略: 引擎接受任意有限数值；参数的界面范围只由 clamp_to_bounds 在边界层使用。
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from ..config import deep_merge_dict
from ..errors import ParameterError


# ========================================================================
# 1. 数值与区间工具
# ========================================================================

def is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def normalize_range(value: Any, name: str = "range") -> Tuple[float, float]:
    """把 [low, high] 规范为 (low, high)，若上下限颠倒则交换。"""
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 2:
        raise ParameterError(f"{name} 必须是包含上下限的二元组，实际为 {value!r}")
    low, high = value[0], value[1]
    if not (is_finite_number(low) and is_finite_number(high)):
        raise ParameterError(f"{name} 的上下限必须是有限数值，实际为 {value!r}")
    low, high = float(low), float(high)
    if low > high:
        low, high = high, low
    return low, high


# ========================================================================
# 2. 参数字段定义
# ========================================================================

@dataclass(frozen=True)
class ParamField:
    """单个参数字段。minimum/maximum 是界面允许的范围，引擎本身不做裁剪。"""

    name: str
    kind: str
    default: Any
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    choices: Tuple[str, ...] = ()
    aliases: Mapping[str, str] = field(default_factory=dict)

    def coerce(self, value: Any, op_id: str = "") -> Any:
        """校验并规范化取值，非法时抛出 ParameterError。"""
        label = f"{op_id}.{self.name}" if op_id else self.name
        if self.kind == "range":
            return normalize_range(value, label)
        if self.kind == "float":
            if not is_finite_number(value):
                raise ParameterError(f"{label} 必须是有限数值，实际为 {value!r}")
            return float(value)
        if self.kind == "int":
            if not is_finite_number(value):
                raise ParameterError(f"{label} 必须是有限数值，实际为 {value!r}")
            return int(value)
        if self.kind == "choice":
            key = str(value)
            key = self.aliases.get(key, key)
            if key not in self.choices:
                raise ParameterError(f"{label} 必须是 {list(self.choices)} 之一，实际为 {value!r}")
            return key
        raise ParameterError(f"未知的参数类型: {self.kind}")

    def clamp(self, value: Any) -> Any:
        """把取值裁剪到界面范围内（仅供边界层使用）。"""
        if self.kind == "choice" or (self.minimum is None and self.maximum is None):
            return value

        def _clamp(x: float) -> float:
            if self.minimum is not None:
                x = max(self.minimum, x)
            if self.maximum is not None:
                x = min(self.maximum, x)
            return x

        if self.kind == "range":
            low, high = value
            return _clamp(low), _clamp(high)
        clamped = _clamp(value)
        return int(clamped) if self.kind == "int" else clamped


def _range(name: str, default: Tuple[float, float], minimum: float, maximum: float) -> ParamField:
    return ParamField(name=name, kind="range", default=default, minimum=minimum, maximum=maximum)


def _float(name: str, default: float, minimum: float, maximum: float) -> ParamField:
    return ParamField(name=name, kind="float", default=default, minimum=minimum, maximum=maximum)


def _int(name: str, default: int, minimum: int, maximum: int) -> ParamField:
    return ParamField(name=name, kind="int", default=default, minimum=minimum, maximum=maximum)


NOISE_MODES: Tuple[str, ...] = ("gaussian", "salt", "pepper", "s&p")

# 使用注册表模式来分离 "参数元数据" 和 "算子逻辑"
OPERATOR_PARAMS: Dict[str, Dict[str, ParamField]] = {
    op_id: {f.name: f for f in fields}
    for op_id, fields in [
        ("hflip", []),
        ("vflip", []),
        ("rotate", [_range("angleRange", (-30.0, 30.0), -180.0, 180.0)]),
        ("crop", [_float("ratio", 0.8, 0.1, 1.0)]),
        ("noise", [
            ParamField(
                name="mode",
                kind="choice",
                default="gaussian",
                choices=NOISE_MODES,
                aliases={"salt&pepper": "s&p", "salt_pepper": "s&p"},
            ),
            _float("amount", 0.05, 0.0, 1.0),
        ]),
        ("brightness", [_range("factorRange", (0.5, 1.5), 0.1, 3.0)]),
        ("contrast", [_range("factorRange", (0.5, 1.5), 0.1, 3.0)]),
        ("scale", [_range("range", (0.8, 1.2), 0.1, 3.0)]),
        ("blur", [_range("kernelRange", (3.0, 7.0), 1.0, 21.0)]),
        ("colorJitter", [
            _float("brightness", 0.2, 0.0, 1.0),
            _float("contrast", 0.2, 0.0, 1.0),
            _float("saturation", 0.2, 0.0, 1.0),
        ]),
        ("motionBlur", [
            _int("size", 15, 5, 50),
            ParamField(name="direction", kind="choice", default="horizontal", choices=("horizontal", "vertical")),
        ]),
        ("elastic", [_float("alpha", 34.0, 10.0, 100.0), _float("sigma", 4.0, 1.0, 20.0)]),
        ("erase", [
            _float("p", 0.5, 0.0, 1.0),
            _float("sl", 0.02, 0.01, 0.2),
            _float("sh", 0.4, 0.1, 0.8),
            _float("r1", 0.3, 0.1, 1.0),
        ]),
        ("translate", [_range("range", (-10.0, 10.0), -50.0, 50.0)]),
        ("waveNoise", [_float("amplitude", 5.0, 1.0, 20.0), _float("frequency", 0.1, 0.05, 0.5)]),
        ("fancyPca", [_float("alphaStd", 0.1, 0.01, 0.5)]),
        ("hsvJitter", [
            _float("hShift", 10.0, 0.0, 180.0),
            _range("sScale", (0.8, 1.2), 0.1, 2.0),
            _range("vScale", (0.8, 1.2), 0.1, 2.0),
        ]),
        ("intensity", [_range("factor", (0.7, 1.3), 0.1, 3.0)]),
        ("edgeEnhance", [_float("strength", 1.0, 0.1, 3.0)]),
        ("randomHsv", [
            _range("hRange", (0.0, 360.0), 0.0, 360.0),
            _range("sRange", (0.0, 1.0), 0.0, 2.0),
            _range("vRange", (0.0, 1.0), 0.0, 2.0),
        ]),
        ("patchShuffle", [_int("gridSize", 16, 8, 64)]),
    ]
}


# ========================================================================
# 3. 参数解析
# ========================================================================

def operator_fields(op_id: str) -> Dict[str, ParamField]:
    if op_id not in OPERATOR_PARAMS:
        raise ParameterError(f"未知的增强算子: {op_id!r}")
    return OPERATOR_PARAMS[op_id]


def default_params(op_id: str) -> Dict[str, Any]:
    """返回算子的默认配置（新字典，可自由修改）。"""
    return {name: f.default for name, f in operator_fields(op_id).items()}


def resolve_params(op_id: str, overrides: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    """
    合并默认值与用户覆盖，得到完整、规范化的只读配置。

    参数:
        op_id (str): 算子 id
        overrides (Mapping, optional): 部分覆盖，只包含需要修改的字段

    返回:
        Mapping[str, Any]: 只读配置；区间为 (low, high) 元组
    """
    fields = operator_fields(op_id)
    overrides = dict(overrides or {})
    unknown = [key for key in overrides if key not in fields]
    if unknown:
        raise ParameterError(f"算子 {op_id} 不支持参数: {unknown}")

    merged = deep_merge_dict(default_params(op_id), overrides)
    resolved = {name: fields[name].coerce(merged[name], op_id) for name in fields}
    return MappingProxyType(resolved)


def clamp_to_bounds(op_id: str, params: Mapping[str, Any]) -> Dict[str, Any]:
    """界面边界层使用：把已解析的参数裁剪到文档规定的范围内。"""
    fields = operator_fields(op_id)
    resolved = resolve_params(op_id, params)
    return {name: fields[name].clamp(value) for name, value in resolved.items()}


# ========================================================================
# 4. 不可变参数集合
# ========================================================================

class ParameterSet(Mapping):
    """
    不可变的 "算子 id -> 完整配置" 映射。

    所有修改方法都返回新的 ParameterSet，未涉及的算子与字段保持原样，
    调用方持有的对象永远不会被引擎修改。
    """

    def __init__(self, overrides: Mapping[str, Mapping[str, Any]] | None = None):
        overrides = overrides or {}
        unknown = [op_id for op_id in overrides if op_id not in OPERATOR_PARAMS]
        if unknown:
            raise ParameterError(f"未知的增强算子: {unknown}")
        self._values: Dict[str, Mapping[str, Any]] = {
            op_id: resolve_params(op_id, overrides.get(op_id)) for op_id in OPERATOR_PARAMS
        }

    @classmethod
    def _from_resolved(cls, values: Dict[str, Mapping[str, Any]]) -> "ParameterSet":
        instance = cls.__new__(cls)
        instance._values = values
        return instance

    # --- 4.1 Mapping 接口 ---

    def __getitem__(self, op_id: str) -> Mapping[str, Any]:
        return self._values[op_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ParameterSet({self.to_dict()})"

    # --- 4.2 写时复制更新 ---

    def with_overrides(self, op_id: str, overrides: Mapping[str, Any]) -> "ParameterSet":
        """合并部分覆盖到某个算子的配置，返回新集合。"""
        merged = deep_merge_dict(dict(self._values[op_id]) if op_id in self._values else {}, dict(overrides))
        values = dict(self._values)
        values[op_id] = resolve_params(op_id, merged)
        return ParameterSet._from_resolved(values)

    def with_value(self, op_id: str, key: str, value: Any) -> "ParameterSet":
        return self.with_overrides(op_id, {key: value})

    def with_bound(self, op_id: str, key: str, index: int, value: float) -> "ParameterSet":
        """只修改区间参数的下限(index=0)或上限(index=1)，另一端保持不变。"""
        fields = operator_fields(op_id)
        if key not in fields or fields[key].kind != "range":
            raise ParameterError(f"{op_id}.{key} 不是区间参数")
        if index not in (0, 1):
            raise ParameterError(f"区间下标必须是 0 或 1，实际为 {index}")
        bounds = list(self._values[op_id][key])
        bounds[index] = value
        return self.with_overrides(op_id, {key: bounds})

    # --- 4.3 导出 ---

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """导出为可序列化的普通字典，区间转为列表。"""
        return {
            op_id: {key: list(value) if isinstance(value, tuple) else value for key, value in values.items()}
            for op_id, values in self._values.items()
        }
