#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-20 17:40:06
@author  : William_Trouvaille
@function: 配置加载与命令行入口测试
"""

import os
import zipfile

import pytest

from augkit import (
    ConfigError,
    ConfigNamespace,
    Image,
    collect_sources,
    deep_merge_dict,
    get_default_config,
    load_config_from_yaml,
    save_config_to_yaml,
    setup_config,
    validate_config,
)
from augkit.config import update_config_from_args

import main as cli


# ========================================================================
# 1. 配置合并
# ========================================================================

def test_deep_merge_does_not_mutate_inputs():
    base = {"batch": {"seed": None, "num_workers": 1}, "operators": ["hflip"]}
    override = {"batch": {"seed": 3}}
    merged = deep_merge_dict(base, override)

    assert merged == {"batch": {"seed": 3, "num_workers": 1}, "operators": ["hflip"]}
    assert base["batch"]["seed"] is None


def test_dotted_args_override_nested_keys():
    config = update_config_from_args(get_default_config(), {"batch.seed": 9, "output.dir": None})
    assert config["batch"]["seed"] == 9
    assert config["output"]["dir"] == "./output"


def test_three_stage_precedence(tmp_path):
    yaml_path = tmp_path / "config.yaml"
    yaml_path.write_text("batch:\n  seed: 5\n  num_workers: 2\noperators: [noise]\n", encoding="utf-8")

    config = setup_config(None, str(yaml_path), {"batch.seed": 8})

    assert isinstance(config, ConfigNamespace)
    assert config.batch.seed == 8
    assert config.batch.num_workers == 2
    assert config.operators == ["noise"]
    assert config.output.quality == 95


def test_missing_or_invalid_yaml_yields_empty_dict(tmp_path):
    assert load_config_from_yaml(str(tmp_path / "missing.yaml")) == {}
    broken = tmp_path / "broken.yaml"
    broken.write_text("- just\n- a list\n", encoding="utf-8")
    assert load_config_from_yaml(str(broken)) == {}


def test_save_and_reload_round_trip(tmp_path):
    path = tmp_path / "nested" / "saved.yaml"
    config = ConfigNamespace(get_default_config())
    save_config_to_yaml(config, str(path))
    assert load_config_from_yaml(str(path)) == get_default_config()


def test_collect_sources_filters_and_sorts(tmp_path):
    for name in ["b.png", "a.PNG", "notes.txt"]:
        (tmp_path / name).write_bytes(Image.solid(2, 2).encode("PNG"))
    names = [item.name for item in collect_sources(str(tmp_path))]
    assert names == ["a.PNG", "b.png"]
    assert collect_sources(str(tmp_path / "nope")) == []


# ========================================================================
# 2. 命令行入口
# ========================================================================

def test_cli_lists_operators(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert cli.main(["--list-operators"]) == 0


def test_cli_runs_batch_and_writes_archive(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    images = tmp_path / "images"
    images.mkdir()
    (images / "one.png").write_bytes(Image.solid(6, 4, (10, 20, 30, 255)).encode("PNG"))
    (images / "two.png").write_bytes(b"broken")

    code = cli.main([
        "--operators", "hflip,noise",
        "--input.dir", str(images),
        "--output.dir", str(tmp_path / "out"),
        "--batch.seed", "4",
    ])

    assert code == 0
    archives = os.listdir(tmp_path / "out")
    assert len(archives) == 1
    with zipfile.ZipFile(tmp_path / "out" / archives[0]) as archive:
        assert archive.namelist() == ["hflip/hflip_one.png", "noise/noise_one.png"]


@pytest.mark.parametrize("operators", ["hflip", "sharpen"])
def test_cli_exit_code_on_precondition_error(tmp_path, monkeypatch, operators):
    monkeypatch.chdir(tmp_path)
    images = tmp_path / "empty"
    images.mkdir()
    if operators == "sharpen":
        (images / "one.png").write_bytes(Image.solid(2, 2).encode("PNG"))
    assert cli.main(["--operators", operators, "--input.dir", str(images)]) == 1


def test_cli_clamps_params_at_the_boundary():
    params = cli.build_parameter_set({"motionBlur": {"size": 500}})
    assert params["motionBlur"]["size"] == 50


# ========================================================================
# 3. 配置校验
# ========================================================================

def test_validate_config_normalizes_fields():
    config = get_default_config()
    config["operators"] = "hflip, noise"
    config["input"]["extensions"] = ["PNG", ".JPG"]
    config["output"]["format"] = "jpg"

    validated = validate_config(config)

    assert validated["operators"] == ["hflip", "noise"]
    assert validated["input"]["extensions"] == [".png", ".jpg"]
    assert validated["output"]["format"] == "JPEG"
    assert config["operators"] == "hflip, noise"


@pytest.mark.parametrize(
    "section, key, value",
    [
        ("batch", "num_workers", 0),
        ("batch", "seed", "abc"),
        ("output", "format", "TIFF"),
        ("output", "quality", 0),
    ],
)
def test_validate_config_rejects_bad_values(section, key, value):
    config = get_default_config()
    config[section][key] = value
    with pytest.raises(ConfigError):
        validate_config(config)


def test_cli_exit_code_on_config_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert cli.main(["--batch.num_workers", "0"]) == 1
