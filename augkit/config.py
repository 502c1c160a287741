#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025/11/1 15:37
@author  : William_Trouvaille
@function: 通用配置管理模块
@detail: 提供批量增强任务的默认配置、从 YAML 加载配置、深度合并、命令行参数覆盖以及转换为属性访问对象 (Namespace) 的功能。
"""
import copy
import os
from collections.abc import Mapping

import yaml
from loguru import logger

from .errors import ConfigError

SUPPORTED_OUTPUT_FORMATS = ("JPEG", "PNG", "WEBP", "BMP")


def get_default_config() -> dict:
    """批量增强任务的默认配置（每次调用返回新字典）。"""
    return {
        'input': {
            'dir': './images',
            'extensions': ['.png', '.jpg', '.jpeg', '.bmp', '.webp'],
        },
        'operators': ['hflip', 'vflip', 'rotate'],
        # 每个算子的部分参数覆盖，例如 rotate: {angleRange: [-10, 10]}
        'params': {},
        'batch': {
            'num_workers': 1,
            'seed': None,
            'show_progress': True,
        },
        'output': {
            'dir': './output',
            'format': 'JPEG',
            'quality': 95,
        },
        'logging': {
            'log_dir': './logs',
            'console_level': 'INFO',
            'file_level': 'DEBUG',
        },
    }


class ConfigNamespace:
    """
    配置命名空间类，将字典转换为对象，以便通过属性访问配置项。

    支持嵌套字典的递归转换和属性更新。
    """

    def __init__(self, config_dict: dict):
        if not isinstance(config_dict, dict):
            raise ValueError("ConfigNamespace 必须使用字典进行初始化")

        for key, value in config_dict.items():
            if isinstance(value, dict):
                setattr(self, key, ConfigNamespace(value))
            else:
                setattr(self, key, value)

    def __repr__(self) -> str:
        return str(vars(self))

    def to_dict(self) -> dict:
        """将 ConfigNamespace 对象递归转换回字典。"""
        result = {}
        for key, value in vars(self).items():
            if isinstance(value, ConfigNamespace):
                result[key] = value.to_dict()
            else:
                result[key] = value
        return result


def deep_merge_dict(base_dict: Mapping, override_dict: Mapping) -> dict:
    """
    递归（深度）合并两个字典，返回新字典，两个输入都不会被修改。
    `override_dict` 中的值将覆盖 `base_dict` 中的值。
    """
    merged = dict(base_dict)
    for key, value in override_dict.items():
        if (key in merged and isinstance(merged[key], Mapping)
                and isinstance(value, Mapping)):
            merged[key] = deep_merge_dict(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config_from_yaml(config_path: str) -> dict:
    """
    加载 YAML 配置文件并返回一个字典。

    参数:
        config_path (str): YAML 配置文件的路径。

    返回:
        dict: 包含配置参数的字典。如果文件不存在或解析失败，则返回空字典。
    """
    resolved_path = os.path.abspath(config_path)

    if not os.path.exists(resolved_path):
        logger.warning(f"配置文件未找到: {resolved_path}。跳过加载。")
        return {}

    logger.debug(f"尝试从 '{resolved_path}' 加载配置...")
    try:
        with open(resolved_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"解析 YAML 文件时出错: {resolved_path}\n错误详情: {e}")
        return {}

    if config is None:
        logger.warning(f"配置文件为空: {resolved_path}")
        return {}
    if not isinstance(config, dict):
        logger.error(f"配置文件顶层必须是映射: {resolved_path}")
        return {}

    logger.success(f"成功加载配置文件: {resolved_path}")
    return config


def update_config_from_args(config_dict: dict, args_dict: dict) -> dict:
    """
    从命令行参数字典更新配置字典。
    支持点分键 (dot-separated keys) 来访问嵌套字典，例如 "batch.seed"。

    参数:
        config_dict (dict): 原始配置字典
        args_dict (dict): 命令行参数字典 (例如来自 argparse)

    返回:
        dict: 更新后的配置字典（新对象）
    """
    updated_config = copy.deepcopy(config_dict)

    # 过滤掉值为 None 的参数，以防止它们覆盖有效的默认值
    valid_args = {k: v for k, v in (args_dict or {}).items() if v is not None}
    if not valid_args:
        return updated_config

    logger.debug(f"正在从命令行参数更新配置: {list(valid_args.keys())}")

    for key, value in valid_args.items():
        keys = key.split('.')
        current = updated_config
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]
        current[keys[-1]] = value

    logger.info(f"配置已从 {len(valid_args)} 个命令行参数更新。")
    return updated_config


def validate_config(config_dict: dict) -> dict:
    """
    检查并规范化批量增强相关的配置项，返回新字典。

    - operators 允许逗号分隔字符串，统一转换为列表
    - extensions 统一为小写且带前导点
    - output.format 统一为大写，JPG 视为 JPEG

    异常:
        ConfigError: 任一字段不合法
    """
    config = copy.deepcopy(config_dict)

    operators = config.get('operators') or []
    if isinstance(operators, str):
        operators = [op.strip() for op in operators.split(',') if op.strip()]
    if not isinstance(operators, list) or not all(isinstance(op, str) for op in operators):
        raise ConfigError(f"operators 必须是算子 id 列表，实际为 {operators!r}")
    config['operators'] = operators

    if not isinstance(config.get('params') or {}, dict):
        raise ConfigError("params 必须是 \"算子 id -> 参数覆盖\" 的映射")
    config['params'] = config.get('params') or {}

    input_cfg = config.setdefault('input', {})
    input_cfg['extensions'] = [
        ext.lower() if ext.startswith('.') else f".{ext.lower()}"
        for ext in input_cfg.get('extensions') or []
    ]

    batch_cfg = config.setdefault('batch', {})
    num_workers = batch_cfg.get('num_workers', 1)
    if isinstance(num_workers, bool) or not isinstance(num_workers, int) or num_workers < 1:
        raise ConfigError(f"batch.num_workers 必须是大于 0 的整数，实际为 {num_workers!r}")
    seed = batch_cfg.get('seed')
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ConfigError(f"batch.seed 必须是整数或 null，实际为 {seed!r}")

    output_cfg = config.setdefault('output', {})
    fmt = str(output_cfg.get('format', 'JPEG')).upper()
    fmt = 'JPEG' if fmt == 'JPG' else fmt
    if fmt not in SUPPORTED_OUTPUT_FORMATS:
        raise ConfigError(f"output.format 必须是 {list(SUPPORTED_OUTPUT_FORMATS)} 之一，实际为 {fmt!r}")
    output_cfg['format'] = fmt
    quality = output_cfg.get('quality', 95)
    if isinstance(quality, bool) or not isinstance(quality, int) or not 1 <= quality <= 100:
        raise ConfigError(f"output.quality 必须在 [1, 100] 内，实际为 {quality!r}")

    return config


def save_config_to_yaml(config: (dict | ConfigNamespace), config_path: str):
    """
    保存配置到 YAML 文件。

    参数:
        config (dict or ConfigNamespace): 要保存的配置
        config_path (str): 保存路径
    """
    config_dict = config.to_dict() if isinstance(config, ConfigNamespace) else config
    resolved_path = os.path.abspath(config_path)

    try:
        os.makedirs(os.path.dirname(resolved_path), exist_ok=True)
    except OSError as e:
        logger.error(f"无法创建用于保存配置的目录: {os.path.dirname(resolved_path)}。错误: {e}")
        return

    logger.debug(f"正在保存配置至: {resolved_path}")
    try:
        with open(resolved_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(
                config_dict,
                f,
                default_flow_style=False,
                allow_unicode=True,
                indent=2,
                sort_keys=False
            )
        logger.success(f"配置文件已保存至: {resolved_path}")
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"保存配置文件失败: {resolved_path}, 错误: {e}")


def print_config(config: (dict | ConfigNamespace), title: str = "当前配置信息"):
    """以格式化的方式打印配置信息到日志 (INFO 级别)。"""
    logger.info("=" * 60)
    logger.info(f"{title}".center(60))
    logger.info("=" * 60)

    def print_recursive(d: dict, indent: int = 0):
        for key, value in d.items():
            if str(key).startswith('_'):
                continue

            prefix = "  " * indent + f"{key}:"
            if isinstance(value, dict):
                logger.info(prefix)
                print_recursive(value, indent + 1)
            else:
                logger.info(f"{prefix} {value}")

    config_dict = config.to_dict() if isinstance(config, ConfigNamespace) else config
    print_recursive(config_dict)
    logger.info("=" * 60)


def setup_config(
        default_config: dict | None,
        yaml_config_path: str | None,
        cmd_args: dict | None
) -> ConfigNamespace:
    """
    配置编排函数，处理三阶段覆盖。

    覆盖优先级: 命令行参数 > YAML 文件 > 默认配置

    参数:
        default_config (dict): 默认配置字典，为 None 时使用 get_default_config()。
        yaml_config_path (str): 用户 YAML 配置文件的路径，为 None 时跳过。
        cmd_args (dict): 点分键形式的命令行参数字典。

    返回:
        ConfigNamespace: 包含最终合并配置的命名空间对象。

    异常:
        ConfigError: 合并后的配置未通过 validate_config 检查。
    """
    logger.info("开始配置加载程序...")

    base_config = default_config if default_config is not None else get_default_config()
    yaml_config = load_config_from_yaml(yaml_config_path) if yaml_config_path else {}

    config_step_1 = deep_merge_dict(base_config, yaml_config)
    config_step_2 = update_config_from_args(config_step_1, cmd_args or {})
    final_config_dict = validate_config(config_step_2)

    print_config(final_config_dict, "最终合并配置")

    final_config_namespace = ConfigNamespace(final_config_dict)
    logger.success("配置加载完成并转换为 ConfigNamespace。")
    return final_config_namespace
