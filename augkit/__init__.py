#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025/11/1 15:16
@version : 1.0.0
@author  : William_Trouvaille
@function: 批量图像增强工具包初始化模块
"""

from .augmentation import (
    BaseTransform,
    OPERATOR_CATALOG,
    OperatorDescriptor,
    ParameterSet,
    TRANSFORM_REGISTRY,
    clamp_to_bounds,
    default_params,
    get_transform,
    list_operators,
    resolve_params,
)
from .batch import (
    BatchEntry,
    BatchPipeline,
    BatchResult,
    CancellationToken,
    TaskState,
    run_batch
)
from .config import (
    setup_config,
    get_default_config,
    validate_config,
    load_config_from_yaml,
    save_config_to_yaml,
    print_config,
    deep_merge_dict,
    ConfigNamespace
)
from .decorators import (
    time_it,
    log_errors
)
from .errors import (
    AugkitError,
    ImageDecodeError,
    ParameterError,
    BatchPreconditionError,
    BatchCancelledError,
    ArchiveBuildError,
    ConfigError
)
from .helpers import (
    get_time,
    format_time,
    format_size
)
from .image import Image, SourceItem, collect_sources
from .logger_config import setup_logging
from .packager import (
    ArchiveEntry,
    ArchiveWriter,
    OutputPackager,
    PackageResult,
    PackageStatus,
    ZipArchiveWriter,
    archive_filename,
    group_results
)
from .progress import Progress, percent_complete

# 版本信息
__version__ = "0.1.0"
__author__ = "William_Trouvaille"

# 导出主要接口
__all__: list[str] = [
    # logger_config.py
    'setup_logging',

    # config.py
    'setup_config',
    'get_default_config',
    'validate_config',
    'load_config_from_yaml',
    'save_config_to_yaml',
    'print_config',
    'deep_merge_dict',
    'ConfigNamespace',

    # errors.py
    'AugkitError',
    'ImageDecodeError',
    'ParameterError',
    'BatchPreconditionError',
    'BatchCancelledError',
    'ArchiveBuildError',
    'ConfigError',

    # image.py
    'Image',
    'SourceItem',
    'collect_sources',

    # progress.py
    'Progress',
    'percent_complete',

    # helpers.py
    'get_time',
    'format_time',
    'format_size',

    # decorators.py
    'time_it',
    'log_errors',

    # batch.py
    'BatchEntry',
    'BatchPipeline',
    'BatchResult',
    'CancellationToken',
    'TaskState',
    'run_batch',

    # packager.py
    'ArchiveEntry',
    'ArchiveWriter',
    'OutputPackager',
    'PackageResult',
    'PackageStatus',
    'ZipArchiveWriter',
    'archive_filename',
    'group_results',

    # augmentation/
    'BaseTransform',
    'OPERATOR_CATALOG',
    'OperatorDescriptor',
    'ParameterSet',
    'TRANSFORM_REGISTRY',
    'clamp_to_bounds',
    'default_params',
    'get_transform',
    'list_operators',
    'resolve_params',
]
