# -*- coding: utf-8 -*-
"""引擎配置 — 不可变，按参数传入各引擎；只有命令行入口读取环境变量"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

RSA_KEY_SIZES = (1024, 2048, 4096)


@dataclass(frozen=True)
class EngineConfig:
    indent: int = 2                            # 格式化缩进宽度
    xml_root: str = 'root'                     # JSON → XML 时的根元素名
    rsa_bits: int = 2048                       # 默认 RSA 密钥长度
    rsa_key_sizes: tuple[int, ...] = RSA_KEY_SIZES
    csv_delimiter: str = ','

    def __post_init__(self):
        if not 0 <= self.indent <= 16:
            raise ValueError(f"缩进宽度超出范围 (0-16): {self.indent}")
        if not self.xml_root:
            raise ValueError("XML 根元素名不能为空")
        if self.rsa_bits not in self.rsa_key_sizes:
            raise ValueError(
                f"不支持的 RSA 密钥长度: {self.rsa_bits}，"
                f"可选 {', '.join(str(b) for b in self.rsa_key_sizes)}")
        if len(self.csv_delimiter) != 1:
            raise ValueError("CSV 分隔符必须是单个字符")


DEFAULT_CONFIG = EngineConfig()

# ── 环境变量覆盖 ─────────────────────────────────────────────
_ENV_PREFIX = 'CODERKIT_'


def _env_int(environ: Mapping[str, str], name: str) -> Optional[int]:
    raw = environ.get(_ENV_PREFIX + name, '').strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"环境变量 {_ENV_PREFIX}{name} 不是整数: {raw!r}")


def load_config(environ: Optional[Mapping[str, str]] = None,
                base: EngineConfig = DEFAULT_CONFIG) -> EngineConfig:
    """读取 CODERKIT_INDENT / CODERKIT_XML_ROOT / CODERKIT_RSA_BITS"""
    if environ is None:
        environ = os.environ
    overrides = {}
    indent = _env_int(environ, 'INDENT')
    if indent is not None:
        overrides['indent'] = indent
    bits = _env_int(environ, 'RSA_BITS')
    if bits is not None:
        overrides['rsa_bits'] = bits
    root = environ.get(_ENV_PREFIX + 'XML_ROOT', '').strip()
    if root:
        overrides['xml_root'] = root
    return replace(base, **overrides) if overrides else base
