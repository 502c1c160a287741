#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-20 15:31:48
@author  : William_Trouvaille
@function: 增强算子测试: 尺寸不变、输入不变、恒等情形与典型数值
"""

import pytest
import torch

from augkit import Image, ParameterError, TRANSFORM_REGISTRY, get_transform
from augkit.augmentation import make_generator

from tests.conftest import gradient_image


# ========================================================================
# 1. 所有算子的通用性质
# ========================================================================

@pytest.mark.parametrize("op_id", list(TRANSFORM_REGISTRY))
def test_operator_keeps_dimensions_and_input(op_id, gradient, generator):
    before = gradient.pixels.clone()
    output = get_transform(op_id).apply(gradient, None, generator)

    assert isinstance(output, Image)
    assert (output.width, output.height) == (gradient.width, gradient.height)
    assert output.pixels.dtype == torch.uint8
    assert output.pixels.shape == (gradient.height, gradient.width, 4)
    assert torch.equal(gradient.pixels, before)
    assert output.pixels.data_ptr() != gradient.pixels.data_ptr()


@pytest.mark.parametrize("op_id", list(TRANSFORM_REGISTRY))
def test_operator_is_reproducible_with_same_seed(op_id, gradient):
    transform = get_transform(op_id)
    first = transform.apply(gradient, None, make_generator(7))
    second = transform.apply(gradient, None, make_generator(7))
    assert first == second


@pytest.mark.parametrize("op_id", list(TRANSFORM_REGISTRY))
def test_operator_handles_single_pixel(op_id, generator):
    image = Image.solid(1, 1, (10, 20, 30, 255))
    output = get_transform(op_id).apply(image, None, generator)
    assert (output.width, output.height) == (1, 1)


def test_registry_has_every_operator():
    assert len(TRANSFORM_REGISTRY) == 21
    assert list(TRANSFORM_REGISTRY)[:3] == ["hflip", "vflip", "rotate"]


# ========================================================================
# 2. 几何算子
# ========================================================================

def test_hflip_twice_is_identity(gradient, generator):
    flip = get_transform("hflip")
    assert flip(flip(gradient, None, generator), None, generator) == gradient


def test_hflip_mirrors_columns(gradient, generator):
    output = get_transform("hflip").apply(gradient, None, generator)
    assert output.pixel(0, 0) == gradient.pixel(gradient.width - 1, 0)


def test_vflip_of_solid_image_is_unchanged(generator):
    red = Image.solid(5, 4, (255, 0, 0, 255))
    assert get_transform("vflip").apply(red, None, generator) == red


@pytest.mark.parametrize("angle", [0.0, 360.0, -720.0])
def test_rotate_by_full_turns_is_identity(gradient, generator, angle):
    output = get_transform("rotate").apply(gradient, {"angleRange": [angle, angle]}, generator)
    assert output == gradient


def test_rotate_exposes_transparent_corners(generator):
    image = Image.solid(32, 32, (200, 50, 50, 255))
    output = get_transform("rotate").apply(image, {"angleRange": [45, 45]}, generator)
    assert output.pixel(0, 0)[3] == 0
    assert output.pixel(16, 16) == (200, 50, 50, 255)


def test_translate_zero_is_identity(gradient, generator):
    assert get_transform("translate").apply(gradient, {"range": [0, 0]}, generator) == gradient


def test_translate_shifts_and_leaves_transparent_area(gradient, generator):
    output = get_transform("translate").apply(gradient, {"range": [5, 5]}, generator)
    assert output.pixel(5, 5) == gradient.pixel(0, 0)
    assert output.pixel(0, 0) == (0, 0, 0, 0)
    assert output.pixel(gradient.width - 1, 4) == (0, 0, 0, 0)


def test_translate_beyond_canvas_is_fully_transparent(generator):
    image = Image.solid(4, 4, (9, 9, 9, 255))
    output = get_transform("translate").apply(image, {"range": [10, 10]}, generator)
    assert int(output.pixels.sum()) == 0


def test_scale_one_is_identity(gradient, generator):
    assert get_transform("scale").apply(gradient, {"range": [1, 1]}, generator) == gradient


def test_scale_down_leaves_transparent_border(generator):
    image = Image.solid(20, 20, (10, 200, 10, 255))
    output = get_transform("scale").apply(image, {"range": [0.5, 0.5]}, generator)
    assert output.pixel(0, 0)[3] == 0
    assert output.pixel(10, 10)[3] == 255


def test_scale_rejects_non_positive_factor(gradient, generator):
    with pytest.raises(ValueError):
        get_transform("scale").apply(gradient, {"range": [0, 0]}, generator)


def test_crop_of_solid_image_is_unchanged(generator):
    image = Image.solid(12, 9, (40, 80, 120, 255))
    assert get_transform("crop").apply(image, {"ratio": 0.5}, generator) == image


def _blocks(pixels: torch.Tensor, size: int):
    height, width = pixels.shape[0] // size * size, pixels.shape[1] // size * size
    return sorted(
        pixels[y:y + size, x:x + size].contiguous().numpy().tobytes()
        for y in range(0, height, size)
        for x in range(0, width, size)
    )


def test_patch_shuffle_preserves_block_multiset(generator):
    image = gradient_image(36, 26)
    output = get_transform("patchShuffle").apply(image, {"gridSize": 8}, generator)
    assert _blocks(output.pixels, 8) == _blocks(image.pixels, 8)
    # 不足一块的尾部行列保持不变
    assert torch.equal(output.pixels[24:], image.pixels[24:])
    assert torch.equal(output.pixels[:, 32:], image.pixels[:, 32:])


def test_patch_shuffle_smaller_than_block_is_identity(generator):
    image = gradient_image(6, 6)
    assert get_transform("patchShuffle").apply(image, {"gridSize": 8}, generator) == image


# ========================================================================
# 3. 颜色算子
# ========================================================================

def test_brightness_scales_and_clamps(solid_gray, generator):
    doubled = get_transform("brightness").apply(solid_gray, {"factorRange": [2, 2]}, generator)
    assert doubled.pixel(0, 0) == (200, 200, 200, 255)

    tripled = get_transform("brightness").apply(solid_gray, {"factorRange": [3, 3]}, generator)
    assert tripled.pixel(3, 2) == (255, 255, 255, 255)


def test_brightness_uses_range_midpoint(solid_gray, generator):
    output = get_transform("brightness").apply(solid_gray, {"factorRange": [1.5, 2.5]}, generator)
    assert output.pixel(0, 0) == (200, 200, 200, 255)


def test_brightness_keeps_alpha():
    image = Image.solid(3, 3, (100, 100, 100, 77))
    output = get_transform("brightness").apply(image, {"factorRange": [2, 2]}, make_generator(0))
    assert output.pixel(1, 1)[3] == 77


def test_contrast_zero_collapses_to_mid_gray(gradient, generator):
    output = get_transform("contrast").apply(gradient, {"factorRange": [0, 0]}, generator)
    assert torch.all(output.pixels[..., :3] == 128)


def test_contrast_one_is_identity(gradient, generator):
    assert get_transform("contrast").apply(gradient, {"factorRange": [1, 1]}, generator) == gradient


def test_intensity_with_fixed_factor_matches_brightness(solid_gray, generator):
    output = get_transform("intensity").apply(solid_gray, {"factor": [2, 2]}, generator)
    assert output.pixel(0, 0) == (200, 200, 200, 255)


def test_color_jitter_with_zero_amplitude_is_identity(gradient, generator):
    params = {"brightness": 0.0, "contrast": 0.0, "saturation": 0.0}
    assert get_transform("colorJitter").apply(gradient, params, generator) == gradient


def test_fancy_pca_shifts_every_pixel_equally(generator):
    image = Image.solid(6, 6, (120, 120, 120, 255))
    output = get_transform("fancyPca").apply(image, {"alphaStd": 0.5}, generator)
    first = output.pixel(0, 0)
    assert all(output.pixel(x, y) == first for x in range(6) for y in range(6))


def test_fancy_pca_zero_std_is_identity(gradient, generator):
    assert get_transform("fancyPca").apply(gradient, {"alphaStd": 0.0}, generator) == gradient


def test_hsv_jitter_neutral_params_is_near_identity(gradient, generator):
    params = {"hShift": 0.0, "sScale": [1, 1], "vScale": [1, 1]}
    output = get_transform("hsvJitter").apply(gradient, params, generator)
    diff = (output.pixels.int() - gradient.pixels.int()).abs()
    assert int(diff.max()) <= 1


def test_hsv_jitter_full_turn_shift_is_near_identity(gradient, generator):
    params = {"hShift": 360.0, "sScale": [1, 1], "vScale": [1, 1]}
    output = get_transform("hsvJitter").apply(gradient, params, generator)
    diff = (output.pixels.int() - gradient.pixels.int()).abs()
    assert int(diff.max()) <= 1


def test_random_hsv_keeps_gray_gray(solid_gray, generator):
    params = {"hRange": [0, 360], "sRange": [1, 1], "vRange": [1, 1]}
    output = get_transform("randomHsv").apply(solid_gray, params, generator)
    r, g, b, a = output.pixel(2, 2)
    assert r == g == b
    assert abs(r - 100) <= 1
    assert a == 255


def test_random_hsv_zero_value_scale_is_black(gradient, generator):
    params = {"hRange": [0, 360], "sRange": [0, 1], "vRange": [0, 0]}
    output = get_transform("randomHsv").apply(gradient, params, generator)
    assert torch.all(output.pixels[..., :3] == 0)
    assert torch.equal(output.pixels[..., 3], gradient.pixels[..., 3])


# ========================================================================
# 4. 噪声、滤波与形变
# ========================================================================

def test_gaussian_noise_is_shared_across_rgb(solid_gray, generator):
    output = get_transform("noise").apply(solid_gray, {"mode": "gaussian"}, generator)
    rgb = output.pixels[..., :3].int()
    assert torch.equal(rgb[..., 0], rgb[..., 1])
    assert torch.equal(rgb[..., 1], rgb[..., 2])
    assert int((rgb - 100).abs().max()) <= 25
    assert torch.all(output.pixels[..., 3] == 255)


@pytest.mark.parametrize(
    "mode, expected",
    [("salt", 255), ("pepper", 0), ("s&p", 0), ("salt&pepper", 0)],
)
def test_impulse_noise_with_full_amount(solid_gray, generator, mode, expected):
    output = get_transform("noise").apply(solid_gray, {"mode": mode, "amount": 1.0}, generator)
    assert torch.all(output.pixels[..., :3] == expected)


def test_impulse_noise_with_zero_amount_is_identity(gradient, generator):
    assert get_transform("noise").apply(gradient, {"mode": "s&p", "amount": 0.0}, generator) == gradient


def test_unknown_noise_mode_is_rejected(gradient, generator):
    with pytest.raises(ParameterError):
        get_transform("noise").apply(gradient, {"mode": "poisson"}, generator)


@pytest.mark.parametrize(
    "op_id, params",
    [
        ("blur", {"kernelRange": [3, 9]}),
        ("motionBlur", {"size": 9, "direction": "horizontal"}),
        ("motionBlur", {"size": 9, "direction": "vertical"}),
        ("elastic", {"alpha": 50.0, "sigma": 3.0}),
    ],
)
def test_smoothing_operators_leave_solid_image_unchanged(op_id, params, generator):
    image = Image.solid(16, 12, (30, 140, 220, 255))
    assert get_transform(op_id).apply(image, params, generator) == image


def test_motion_blur_follows_direction(generator):
    # 只沿 x 变化的图像，垂直方向模糊不应改变它
    image = gradient_image(20, 10)
    columns = image.pixels.clone()
    columns[..., 1] = 0
    columns[..., 2] = columns[..., 0]
    image = Image.from_tensor(columns)

    vertical = get_transform("motionBlur").apply(image, {"size": 5, "direction": "vertical"}, generator)
    horizontal = get_transform("motionBlur").apply(image, {"size": 5, "direction": "horizontal"}, generator)
    assert vertical == image
    assert horizontal != image


def test_blur_changes_textured_image(gradient, generator):
    output = get_transform("blur").apply(gradient, {"kernelRange": [5, 5]}, generator)
    assert output != gradient
    assert torch.equal(output.pixels[..., 3], gradient.pixels[..., 3])


def test_edge_enhance_zero_strength_is_identity(gradient, generator):
    assert get_transform("edgeEnhance").apply(gradient, {"strength": 0.0}, generator) == gradient


def test_edge_enhance_keeps_border_pixels(gradient, generator):
    output = get_transform("edgeEnhance").apply(gradient, {"strength": 2.0}, generator)
    assert torch.equal(output.pixels[0], gradient.pixels[0])
    assert torch.equal(output.pixels[:, -1], gradient.pixels[:, -1])


def test_edge_enhance_on_tiny_image_is_identity(generator):
    image = gradient_image(2, 2)
    assert get_transform("edgeEnhance").apply(image, {"strength": 3.0}, generator) == image


def test_wave_noise_zero_amplitude_is_identity(gradient, generator):
    params = {"amplitude": 0.0, "frequency": 0.3}
    assert get_transform("waveNoise").apply(gradient, params, generator) == gradient


def test_wave_noise_only_moves_existing_pixels(gradient, generator):
    output = get_transform("waveNoise").apply(gradient, {"amplitude": 4.0, "frequency": 0.1}, generator)
    source_colors = {tuple(p) for p in gradient.pixels.view(-1, 4).tolist()}
    assert all(tuple(p) in source_colors for p in output.pixels.view(-1, 4).tolist())


# ========================================================================
# 5. 遮挡
# ========================================================================

def test_erase_with_zero_probability_is_identity(gradient, generator):
    assert get_transform("erase").apply(gradient, {"p": 0.0}, generator) == gradient


def test_erase_draws_opaque_black_rectangle(gradient, generator):
    params = {"p": 1.0, "sl": 0.25, "sh": 0.25, "r1": 1.0}
    output = get_transform("erase").apply(gradient, params, generator)
    black = (output.pixels == torch.tensor([0, 0, 0, 255], dtype=torch.uint8)).all(dim=-1)
    assert int(black.sum()) > 0


def test_erase_rejects_non_positive_r1(gradient, generator):
    with pytest.raises(ValueError):
        get_transform("erase").apply(gradient, {"p": 1.0, "r1": 0.0}, generator)


# ========================================================================
# 6. 参数校验
# ========================================================================

def test_non_finite_bound_is_rejected(gradient, generator):
    with pytest.raises(ParameterError):
        get_transform("brightness").apply(gradient, {"factorRange": [float("nan"), 1.0]}, generator)


def test_unknown_parameter_key_is_rejected(gradient, generator):
    with pytest.raises(ParameterError):
        get_transform("rotate").apply(gradient, {"angle": 10}, generator)


def test_unknown_operator_is_rejected():
    with pytest.raises(ParameterError):
        get_transform("sharpen")
