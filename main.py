#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-20T10:12:00
@author  : William_Trouvaille
@function: 批量图像增强命令行入口

功能说明:
    1. 配置加载 (augkit/config.py):
       - 默认配置 < config.yaml < 点分命令行参数 (例如 --batch.seed 7)
    2. 批量增强 (augkit/batch.py):
       - 对输入目录中的每张图像执行所选算子，单个任务失败会退化为原图
    3. 打包输出 (augkit/packager.py):
       - 按算子分组写入 augmented_images_{日期}.zip

用法:
    python main.py -c config.yaml --operators hflip,rotate --batch.seed 42
    python main.py --list-operators
"""

import argparse
import sys

from loguru import logger

from augkit import (
    BatchPipeline,
    BatchPreconditionError,
    ArchiveBuildError,
    ConfigError,
    OutputPackager,
    ParameterError,
    ParameterSet,
    ZipArchiveWriter,
    clamp_to_bounds,
    collect_sources,
    get_default_config,
    get_time,
    list_operators,
    log_errors,
    setup_config,
    setup_logging
)


# ========================================================================
# 1. 命令行参数
# ========================================================================

def parse_arguments(argv=None) -> dict:
    """定义和解析命令行参数，点分 key 用于覆盖嵌套配置。"""
    parser = argparse.ArgumentParser(description="批量图像增强")
    parser.add_argument(
        '-c', '--config',
        type=str,
        default='config.yaml',
        help='YAML 配置文件路径，不存在时使用默认配置'
    )
    parser.add_argument(
        '--operators',
        type=str,
        help='逗号分隔的算子 id 列表 (例如: hflip,rotate,noise)'
    )
    parser.add_argument('--input.dir', type=str, help='覆盖输入图像目录')
    parser.add_argument('--output.dir', type=str, help='覆盖归档输出目录')
    parser.add_argument('--batch.seed', type=int, help='随机种子，设置后结果可复现')
    parser.add_argument('--batch.num_workers', type=int, help='工作线程数')
    parser.add_argument(
        '--list-operators',
        action='store_true',
        help='列出所有可用算子后退出'
    )

    args = vars(parser.parse_args(argv))
    if args.get('operators'):
        args['operators'] = [op.strip() for op in args['operators'].split(',') if op.strip()]
    return args


def print_operators() -> None:
    logger.info("=" * 60)
    logger.info("可用增强算子".center(60))
    logger.info("=" * 60)
    for descriptor in list_operators():
        flag = "可配置" if descriptor.has_parameters else "无参数"
        logger.info(f"  {descriptor.id:<14} {descriptor.display_name:<12} ({flag})")


def build_parameter_set(params_config: dict) -> ParameterSet:
    """界面边界: 把配置中的部分参数裁剪到允许范围后再交给引擎。"""
    clamped = {op_id: clamp_to_bounds(op_id, overrides or {}) for op_id, overrides in (params_config or {}).items()}
    return ParameterSet(clamped)


# ========================================================================
# 2. 主程序入口
# ========================================================================

@log_errors(re_raise=False, default=1)
def main(argv=None) -> int:
    cmd_args = parse_arguments(argv)
    default_config = get_default_config()

    setup_logging(
        log_dir=default_config['logging']['log_dir'],
        console_level=default_config['logging']['console_level'],
        file_level=default_config['logging']['file_level']
    )

    if cmd_args.pop('list_operators', False):
        print_operators()
        return 0

    try:
        config = setup_config(
            default_config=default_config,
            yaml_config_path=cmd_args.pop('config', None),
            cmd_args=cmd_args
        )
    except ConfigError as e:
        logger.error(f"配置错误: {e}")
        return 1
    setup_logging(
        log_dir=config.logging.log_dir,
        console_level=config.logging.console_level,
        file_level=config.logging.file_level
    )

    logger.info("=" * 60)
    logger.info(f"批量图像增强 {get_time()}".center(60))
    logger.info("=" * 60)

    # --- 2.1 输入与参数 ---
    try:
        parameter_set = build_parameter_set(config.to_dict().get('params'))
    except ParameterError as e:
        logger.error(f"参数配置错误: {e}")
        return 1

    sources = collect_sources(config.input.dir, config.input.extensions)

    # --- 2.2 批量增强 ---
    pipeline = BatchPipeline(
        parameter_set=parameter_set,
        num_workers=config.batch.num_workers,
        seed=config.batch.seed,
        show_progress=config.batch.show_progress
    )
    try:
        result = pipeline.run(sources, list(config.operators))
    except BatchPreconditionError as e:
        logger.error(f"无法开始批处理: {e}")
        return 1

    if result.degraded:
        logger.warning(f"{len(result.degraded)} 个任务退化为原图")

    # --- 2.3 打包 ---
    packager = OutputPackager(fmt=config.output.format, quality=config.output.quality)
    try:
        package = packager.package(result, ZipArchiveWriter())
        if not package.ok:
            logger.error("归档写入器未就绪")
            return 1
        packager.save(package, config.output.dir)
    except ArchiveBuildError as e:
        logger.error(f"打包失败: {e}")
        return 1

    logger.success("批量增强完成。")
    return 0


if __name__ == '__main__':
    sys.exit(main())
