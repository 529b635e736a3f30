# -*- coding: utf-8 -*-
"""结果 / 错误类型 — 所有引擎共用

各引擎内部照常抛 ValueError，对外入口统一转换成 Result，
调用方只需判断 ok，不必包一层 try。
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar('T')


class ErrorKind(str, enum.Enum):
    INVALID_ENCODING = 'InvalidEncoding'
    INVALID_JSON = 'InvalidJson'
    MALFORMED_MARKUP = 'MalformedMarkup'
    STRUCTURAL_VIOLATION = 'StructuralViolation'
    MALFORMED_TOKEN = 'MalformedToken'
    UNSUPPORTED_OPERATION = 'UnsupportedOperation'


# ── 错误值 ───────────────────────────────────────────────────
@dataclass(frozen=True)
class TransformError:
    kind: ErrorKind
    message: str

    def __str__(self):
        return f"[{self.kind.value}] {self.message}"


@dataclass(frozen=True)
class CodecError(TransformError):
    pass


@dataclass(frozen=True)
class ParseError(TransformError):
    """解析失败；line / column 从 1 开始，position 从 0 开始（已知时）"""
    line: Optional[int] = None
    column: Optional[int] = None
    position: Optional[int] = None

    def __str__(self):
        if self.line is None:
            return super().__str__()
        return f"[{self.kind.value}] 第 {self.line} 行, 第 {self.column} 列: {self.message}"


@dataclass(frozen=True)
class SerializeError(TransformError):
    pass


@dataclass(frozen=True)
class FormatError(TransformError):
    pass


@dataclass(frozen=True)
class TokenError(TransformError):
    pass


@dataclass(frozen=True)
class DiffError(TransformError):
    pass


# ── 内部异常（只在引擎内部流动，入口处转成错误值）────────────
class EngineFailure(ValueError):
    """引擎内部的输入错误，携带一个已构造好的错误值"""

    def __init__(self, error: TransformError):
        super().__init__(str(error))
        self.error = error


class TransformFailed(ValueError):
    """Result.unwrap() 在失败结果上调用时抛出"""

    def __init__(self, error: TransformError):
        super().__init__(str(error))
        self.error = error


# ── Result ───────────────────────────────────────────────────
@dataclass(frozen=True)
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[TransformError] = None

    @classmethod
    def success(cls, value: Any) -> 'Result':
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: TransformError) -> 'Result':
        return cls(ok=False, error=error)

    def unwrap(self):
        if not self.ok:
            raise TransformFailed(self.error)
        return self.value


CodecResult = Result
