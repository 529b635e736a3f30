# -*- coding: utf-8 -*-
"""文本 / JSON 比对引擎 — 纯函数，无 UI 依赖

行比对默认按行号逐行对齐（不做 LCS），插入一行会让后面的行全部变成
CHANGED；需要重新对齐时传 realign=True，改用 difflib 的匹配块。

结构比对只在两个 dict 之间逐键递归；其余值按严格相等比较
（True 与 1 不相等，1 与 1.0 相等）。
"""

import copy
import difflib
import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .results import DiffError, EngineFailure, ErrorKind, ParseError, Result
from .structured import load_json

logger = logging.getLogger(__name__)


class LineKind(str, enum.Enum):
    EQUAL = 'equal'
    ADDED = 'added'
    REMOVED = 'removed'
    CHANGED = 'changed'


class ChangeKind(str, enum.Enum):
    ADDED = 'added'
    REMOVED = 'removed'
    MODIFIED = 'modified'


@dataclass(frozen=True)
class LineDiffEntry:
    line_number: int
    kind: LineKind
    before: Optional[str] = None
    after: Optional[str] = None


@dataclass(frozen=True)
class StructuralDiffEntry:
    path: str
    kind: ChangeKind
    old_value: Any = None
    new_value: Any = None


@dataclass(frozen=True)
class DiffSummary:
    equal: int = 0
    added: int = 0
    removed: int = 0
    changed: int = 0


# ══════════════════════════════════════════════════════════════
#  行比对
# ══════════════════════════════════════════════════════════════
def _positional(lines_a, lines_b):
    entries = []
    for i in range(max(len(lines_a), len(lines_b))):
        no = i + 1
        if i >= len(lines_b):
            entries.append(LineDiffEntry(no, LineKind.REMOVED, before=lines_a[i]))
        elif i >= len(lines_a):
            entries.append(LineDiffEntry(no, LineKind.ADDED, after=lines_b[i]))
        elif lines_a[i] == lines_b[i]:
            entries.append(LineDiffEntry(no, LineKind.EQUAL, lines_a[i], lines_b[i]))
        else:
            entries.append(LineDiffEntry(no, LineKind.CHANGED, lines_a[i], lines_b[i]))
    return entries


def _realigned(lines_a, lines_b):
    """difflib 匹配块；ADDED 行号取文本 B，其余取文本 A"""
    entries = []
    sm = difflib.SequenceMatcher(None, lines_a, lines_b, autojunk=False)
    for op, i1, i2, j1, j2 in sm.get_opcodes():
        if op == 'equal':
            for k in range(i2 - i1):
                line = lines_a[i1 + k]
                entries.append(LineDiffEntry(i1 + k + 1, LineKind.EQUAL, line, line))
        elif op == 'delete':
            for k in range(i1, i2):
                entries.append(LineDiffEntry(k + 1, LineKind.REMOVED, before=lines_a[k]))
        elif op == 'insert':
            for k in range(j1, j2):
                entries.append(LineDiffEntry(k + 1, LineKind.ADDED, after=lines_b[k]))
        else:
            # replace: 成对的算 CHANGED，多出来的算 REMOVED / ADDED
            old_lines = lines_a[i1:i2]
            new_lines = lines_b[j1:j2]
            for k in range(max(len(old_lines), len(new_lines))):
                if k < len(old_lines) and k < len(new_lines):
                    entries.append(LineDiffEntry(
                        i1 + k + 1, LineKind.CHANGED, old_lines[k], new_lines[k]))
                elif k < len(old_lines):
                    entries.append(LineDiffEntry(
                        i1 + k + 1, LineKind.REMOVED, before=old_lines[k]))
                else:
                    entries.append(LineDiffEntry(
                        j1 + k + 1, LineKind.ADDED, after=new_lines[k]))
    return entries


def line_diff(text_a, text_b, realign=False):
    """逐行比对，返回 LineDiffEntry 列表（包含 EQUAL 行）"""
    lines_a = text_a.split('\n')
    lines_b = text_b.split('\n')
    if realign:
        return _realigned(lines_a, lines_b)
    return _positional(lines_a, lines_b)


def summarize(entries) -> DiffSummary:
    counts = {kind: 0 for kind in LineKind}
    for entry in entries:
        counts[entry.kind] += 1
    return DiffSummary(
        equal=counts[LineKind.EQUAL], added=counts[LineKind.ADDED],
        removed=counts[LineKind.REMOVED], changed=counts[LineKind.CHANGED],
    )


def has_changes(entries):
    return any(entry.kind != LineKind.EQUAL for entry in entries)


# ══════════════════════════════════════════════════════════════
#  结构比对
# ══════════════════════════════════════════════════════════════
def strict_equal(a, b):
    """按 JSON 语义比较: bool 与数字不混用，dict / list 递归比较"""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if isinstance(a, dict) and isinstance(b, dict):
        return (a.keys() == b.keys()
                and all(strict_equal(a[k], b[k]) for k in a))
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(strict_equal(x, y) for x, y in zip(a, b))
    return type(a) is type(b) and a == b


def _join(path, key):
    return f'{path}.{key}' if path else str(key)


def _walkable(a, b, index_sequences):
    if isinstance(a, dict) and isinstance(b, dict):
        return True
    return index_sequences and isinstance(a, list) and isinstance(b, list)


def _items(value):
    if isinstance(value, dict):
        return value
    return {str(i): item for i, item in enumerate(value)}


def _walk(a, b, path, index_sequences, out):
    items_a = _items(a)
    items_b = _items(b)
    keys = list(items_a) + [k for k in items_b if k not in items_a]
    for key in keys:
        current = _join(path, key)
        if key not in items_a:
            out.append(StructuralDiffEntry(
                current, ChangeKind.ADDED, new_value=copy.deepcopy(items_b[key])))
        elif key not in items_b:
            out.append(StructuralDiffEntry(
                current, ChangeKind.REMOVED, old_value=copy.deepcopy(items_a[key])))
        elif _walkable(items_a[key], items_b[key], index_sequences):
            _walk(items_a[key], items_b[key], current, index_sequences, out)
        elif not strict_equal(items_a[key], items_b[key]):
            out.append(StructuralDiffEntry(
                current, ChangeKind.MODIFIED,
                old_value=copy.deepcopy(items_a[key]),
                new_value=copy.deepcopy(items_b[key])))


def structural_diff(value_a, value_b, path='', index_sequences=False) -> Result:
    """递归比对两个通用值；相同返回空列表"""
    try:
        if strict_equal(value_a, value_b):
            return Result.success([])
        if not _walkable(value_a, value_b, index_sequences):
            logger.debug("结构比对类型不兼容: %s / %s",
                         type(value_a).__name__, type(value_b).__name__)
            return Result.failure(DiffError(
                ErrorKind.UNSUPPORTED_OPERATION,
                f"无法逐键比对 {type(value_a).__name__} 与 {type(value_b).__name__}"))
        out = []
        _walk(value_a, value_b, path, index_sequences, out)
    except RecursionError:
        logger.debug("结构比对嵌套过深")
        return Result.failure(DiffError(
            ErrorKind.UNSUPPORTED_OPERATION, "嵌套层级过深，无法逐键比对"))
    return Result.success(out)


def json_diff(text_a, text_b, index_sequences=False) -> Result:
    """先把两边按 JSON 解析，再做结构比对"""
    values = []
    for label, text in (('左侧', text_a), ('右侧', text_b)):
        try:
            values.append(load_json(text))
        except EngineFailure as e:
            err = e.error
            return Result.failure(ParseError(
                err.kind, f"{label} {err.message}",
                line=err.line, column=err.column, position=err.position))
    return structural_diff(values[0], values[1], index_sequences=index_sequences)
