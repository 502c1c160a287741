#!/usr/bin/python
# -*- coding:utf-8 -*-
"""
Created on 2025-11-18 10:15:40
@author  : William_Trouvaille
@function: 图像值类型与输入源
@detail:
    - Image: 不可变的 8 位 RGBA 图像，像素以 (H, W, 4) 的 torch.uint8 张量保存
    - SourceItem: 批处理的输入项，延迟解码，解码失败抛出 ImageDecodeError
    - collect_sources: 从目录收集图像文件
"""

from __future__ import annotations

import io
import os
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence, Tuple

import numpy as np
import torch
from loguru import logger
from PIL import Image as PILImage
from PIL import ImageOps
from PIL import UnidentifiedImageError

from .errors import ImageDecodeError

DEFAULT_EXTENSIONS: Tuple[str, ...] = (".png", ".jpg", ".jpeg", ".bmp", ".webp")


# ========================================================================
# 1. 图像值类型
# ========================================================================

@dataclass(frozen=True)
class Image:
    """
    不可变的 RGBA 图像，所有算子都返回新的 Image 而不修改输入。

    frozen 只保护字段绑定，pixels 张量本身仍可原地写入，调用方必须把它视为只读。
    from_tensor() 与 copy() 会复制缓冲区，需要修改像素时先复制。
    """

    width: int
    height: int
    pixels: torch.Tensor

    def __post_init__(self) -> None:
        pixels = self.pixels
        if not isinstance(pixels, torch.Tensor):
            raise TypeError("pixels 必须是 torch.Tensor")
        if pixels.dtype != torch.uint8:
            raise TypeError(f"pixels 必须是 torch.uint8，实际为 {pixels.dtype}")
        expected = (self.height, self.width, 4)
        if tuple(pixels.shape) != expected:
            raise ValueError(f"pixels 形状应为 {expected}，实际为 {tuple(pixels.shape)}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("图像宽高必须大于0")

    # --- 1.1 构造 ---

    @classmethod
    def from_tensor(cls, pixels: torch.Tensor) -> "Image":
        """由 (H, W, 4) uint8 张量构造，会复制一份以保证不共享缓冲区。"""
        height, width = int(pixels.shape[0]), int(pixels.shape[1])
        return cls(width=width, height=height, pixels=pixels.detach().to("cpu").clone().contiguous())

    @classmethod
    def from_buffer(cls, width: int, height: int, buffer: bytes | bytearray | Sequence[int]) -> "Image":
        """由按行优先排列的 RGBA 字节缓冲区构造。"""
        expected = width * height * 4
        data = bytes(buffer)
        if len(data) != expected:
            raise ValueError(f"缓冲区长度应为 {expected}，实际为 {len(data)}")
        array = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
        return cls(width=width, height=height, pixels=torch.from_numpy(array.copy()))

    @classmethod
    def from_pil(cls, pil_image: PILImage.Image) -> "Image":
        rgba = pil_image.convert("RGBA")
        array = np.asarray(rgba, dtype=np.uint8)
        return cls(width=rgba.width, height=rgba.height, pixels=torch.from_numpy(array.copy()))

    @classmethod
    def decode(cls, data: bytes, name: str = "<bytes>") -> "Image":
        """
        解码任意 Pillow 支持的图像格式，失败时抛出 ImageDecodeError。

        带 EXIF Orientation 标签的图像会先按标签转正，与浏览器显示方向一致。
        """
        try:
            with PILImage.open(io.BytesIO(data)) as pil_image:
                pil_image.load()
                return cls.from_pil(ImageOps.exif_transpose(pil_image))
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise ImageDecodeError(f"无法解码图像 '{name}': {exc}") from exc

    @classmethod
    def solid(cls, width: int, height: int, rgba: Tuple[int, int, int, int] = (0, 0, 0, 255)) -> "Image":
        """生成纯色图像。"""
        color = torch.tensor(rgba, dtype=torch.uint8)
        pixels = color.view(1, 1, 4).expand(height, width, 4).clone()
        return cls(width=width, height=height, pixels=pixels)

    # --- 1.2 导出 ---

    def copy(self) -> "Image":
        return Image(width=self.width, height=self.height, pixels=self.pixels.clone())

    def to_buffer(self) -> bytes:
        """返回长度为 width*height*4 的 RGBA 字节序列。"""
        return self.pixels.contiguous().numpy().tobytes()

    def to_pil(self) -> PILImage.Image:
        return PILImage.fromarray(self.pixels.contiguous().numpy())

    def encode(self, fmt: str = "JPEG", quality: int = 95) -> bytes:
        """编码为图像文件字节。JPEG 不支持透明通道，编码前转换为 RGB。"""
        fmt = fmt.upper()
        pil_image = self.to_pil()
        if fmt in ("JPEG", "JPG"):
            fmt = "JPEG"
            pil_image = pil_image.convert("RGB")
        buffer = io.BytesIO()
        save_kwargs = {"quality": int(quality)} if fmt in ("JPEG", "WEBP") else {}
        pil_image.save(buffer, format=fmt, **save_kwargs)
        return buffer.getvalue()

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        r, g, b, a = self.pixels[y, x].tolist()
        return r, g, b, a

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and torch.equal(self.pixels, other.pixels)
        )

    def __repr__(self) -> str:
        return f"Image(width={self.width}, height={self.height})"


# ========================================================================
# 2. 输入源
# ========================================================================

@dataclass(frozen=True)
class SourceItem:
    """批处理输入项：原始文件名与一个延迟执行的解码函数。"""

    name: str
    loader: Callable[[], Image]

    def load(self) -> Image:
        image = self.loader()
        if not isinstance(image, Image):
            raise ImageDecodeError(f"输入 '{self.name}' 没有返回 Image 对象")
        return image

    @classmethod
    def from_path(cls, path: str) -> "SourceItem":
        name = os.path.basename(path)

        def _load() -> Image:
            try:
                with open(path, "rb") as f:
                    data = f.read()
            except OSError as exc:
                raise ImageDecodeError(f"无法读取图像文件 '{path}': {exc}") from exc
            return Image.decode(data, name=name)

        return cls(name=name, loader=_load)

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> "SourceItem":
        return cls(name=name, loader=lambda: Image.decode(data, name=name))

    @classmethod
    def from_image(cls, name: str, image: Image) -> "SourceItem":
        return cls(name=name, loader=lambda: image)


def collect_sources(directory: str, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> List[SourceItem]:
    """
    收集目录下的图像文件（不递归），按文件名排序。

    参数:
        directory (str): 图像目录
        extensions (Iterable[str]): 允许的扩展名（不区分大小写）

    返回:
        List[SourceItem]: 延迟解码的输入项列表
    """
    resolved = os.path.abspath(directory)
    if not os.path.isdir(resolved):
        logger.warning(f"输入目录不存在: {resolved}")
        return []

    allowed = {ext.lower() for ext in extensions}
    names = sorted(
        entry for entry in os.listdir(resolved)
        if os.path.isfile(os.path.join(resolved, entry)) and os.path.splitext(entry)[1].lower() in allowed
    )
    logger.info(f"在 {resolved} 中找到 {len(names)} 张图像")
    return [SourceItem.from_path(os.path.join(resolved, name)) for name in names]
