#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-18 10:02:11
@author  : William_Trouvaille
@function: 批量增强引擎使用的异常类型
"""


class AugkitError(Exception):
    """augkit 所有异常的基类。"""


class ImageDecodeError(AugkitError):
    """源图像无法解码，只影响该图像对应的任务。"""


class ParameterError(AugkitError, ValueError):
    """算子参数非法（未知算子、未知字段、非有限数值等）。"""


class BatchPreconditionError(AugkitError):
    """批处理开始前的前置条件检查失败，例如没有图像或没有算子。"""


class BatchCancelledError(AugkitError):
    """批处理被取消，不返回任何部分结果。"""


class ArchiveBuildError(AugkitError):
    """归档构建失败，区别于归档能力尚未就绪。"""


class ConfigError(AugkitError, ValueError):
    """合并后的配置不合法，例如线程数小于 1 或输出格式不受支持。"""
