# -*- coding: utf-8 -*-
"""结构化格式互转 — JSON / XML / CSV / YAML ↔ 通用值

通用值就是普通的 Python 对象: None / bool / int / float / str / list / dict。
解析器只求覆盖日常粘贴的代码片段，不追求完整的规范实现:
    - CSV:  第一行非空行为表头，值一律为字符串
    - YAML: 只支持顶层扁平的 key: value，遇到缩进/列表直接报错

依赖:
    lxml    — XML
    pyyaml  — YAML 输出
"""

import csv
import io
import json
import logging
import re

import yaml

from .config import DEFAULT_CONFIG
from .results import (
    EngineFailure, ErrorKind, ParseError, Result, SerializeError,
)
from .xml_tools import value_to_xml, xml_to_value

logger = logging.getLogger(__name__)

FORMATS = ['json', 'xml', 'csv', 'yaml']


# ══════════════════════════════════════════════════════════════
#  JSON
# ══════════════════════════════════════════════════════════════
def _reject_constant(name):
    raise ValueError(f"不是合法的 JSON 值: {name}")


def load_json(text):
    """严格解析 JSON（拒绝 NaN / Infinity）"""
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise EngineFailure(ParseError(
            ErrorKind.INVALID_JSON, f"JSON 语法错误: {e.msg}",
            line=e.lineno, column=e.colno, position=e.pos))
    except ValueError as e:
        raise EngineFailure(ParseError(ErrorKind.INVALID_JSON, str(e)))
    except RecursionError:
        raise EngineFailure(ParseError(ErrorKind.INVALID_JSON, "JSON 嵌套层级过深"))


def dump_json(value, indent=None):
    """indent=None 输出紧凑格式，否则按缩进美化"""
    separators = (',', ':') if indent is None else (',', ': ')
    try:
        return json.dumps(value, indent=indent, separators=separators,
                          ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EngineFailure(SerializeError(
            ErrorKind.STRUCTURAL_VIOLATION, f"无法输出为 JSON: {e}"))
    except RecursionError:
        raise EngineFailure(SerializeError(
            ErrorKind.STRUCTURAL_VIOLATION, "JSON 嵌套层级过深"))


# ══════════════════════════════════════════════════════════════
#  CSV
# ══════════════════════════════════════════════════════════════
def _csv_violation(message):
    return EngineFailure(ParseError(ErrorKind.STRUCTURAL_VIOLATION, message))


def csv_to_value(text, delimiter=','):
    """CSV → 对象数组；第一行为表头，缺失的单元格补空字符串"""
    try:
        rows = [
            row for row in csv.reader(io.StringIO(text.strip()),
                                      delimiter=delimiter, skipinitialspace=True)
            if any(cell.strip() for cell in row)
        ]
    except csv.Error as e:
        raise _csv_violation(f"CSV 解析失败: {e}")

    if len(rows) < 2:
        raise _csv_violation("CSV 至少需要表头和一行数据")

    headers = [h.strip() for h in rows[0]]
    if len(headers) < 2:
        raise _csv_violation(f"表头只有一列，找不到分隔符 {delimiter!r}")
    if any(not h for h in headers):
        raise _csv_violation("表头中存在空列名")
    seen = set()
    for h in headers:
        if h in seen:
            raise _csv_violation(f"表头列名重复: {h}")
        seen.add(h)

    result = []
    for row in rows[1:]:
        cells = [c.strip() for c in row]
        result.append({
            h: (cells[i] if i < len(cells) else '')
            for i, h in enumerate(headers)
        })
    return result


def _csv_cell(value, delimiter):
    if value is None:
        text = ''
    elif isinstance(value, bool):
        text = 'true' if value else 'false'
    elif isinstance(value, str):
        text = value
    elif isinstance(value, (int, float)):
        text = json.dumps(value)
    else:
        text = json.dumps(value, ensure_ascii=False, separators=(',', ':'))
    if delimiter in text or '"' in text or '\n' in text or '\r' in text:
        text = '"' + text.replace('"', '""') + '"'
    return text


def value_to_csv(value, delimiter=','):
    """对象数组 → CSV；表头取第一个对象的键，缺失的键输出为空"""
    if (not isinstance(value, list) or not value
            or not all(isinstance(row, dict) for row in value)):
        raise EngineFailure(SerializeError(
            ErrorKind.STRUCTURAL_VIOLATION, "CSV 输出需要非空的对象数组"))
    headers = list(value[0].keys())
    if not headers:
        raise EngineFailure(SerializeError(
            ErrorKind.STRUCTURAL_VIOLATION, "第一个对象没有任何键，无法生成表头"))

    try:
        lines = [delimiter.join(_csv_cell(h, delimiter) for h in headers)]
        for row in value:
            lines.append(delimiter.join(_csv_cell(row.get(h), delimiter) for h in headers))
    except RecursionError:
        raise EngineFailure(SerializeError(
            ErrorKind.STRUCTURAL_VIOLATION, "单元格嵌套层级过深"))
    return '\n'.join(lines)


# ══════════════════════════════════════════════════════════════
#  YAML（受限: 只支持扁平 key: value）
# ══════════════════════════════════════════════════════════════
_QUOTE_RE = re.compile(r'^["\']|["\']$')


def yaml_to_value(text):
    result = {}
    for line_no, line in enumerate(text.splitlines(), 1):
        stripped = line.strip()
        if not stripped or stripped.startswith('#') or stripped in ('---', '...'):
            continue
        if line[0] in ' \t' or stripped == '-' or stripped.startswith('- '):
            raise EngineFailure(ParseError(
                ErrorKind.STRUCTURAL_VIOLATION,
                "不支持嵌套结构（缩进或列表），只支持扁平的 key: value",
                line=line_no, column=1))
        key, sep, rest = stripped.partition(':')
        if not sep or not key.strip():
            raise EngineFailure(ParseError(
                ErrorKind.STRUCTURAL_VIOLATION, "缺少 key: value 形式",
                line=line_no, column=1))
        result[key.strip()] = _QUOTE_RE.sub('', rest.strip())
    return result


def value_to_yaml(value, indent=None):
    try:
        return yaml.safe_dump(
            value, allow_unicode=True, default_flow_style=False,
            sort_keys=False, indent=indent if indent and indent >= 2 else None)
    except yaml.YAMLError as e:
        raise EngineFailure(SerializeError(
            ErrorKind.STRUCTURAL_VIOLATION, f"无法输出为 YAML: {e}"))
    except RecursionError:
        raise EngineFailure(SerializeError(
            ErrorKind.STRUCTURAL_VIOLATION, "YAML 嵌套层级过深"))


# ══════════════════════════════════════════════════════════════
#  公共接口
# ══════════════════════════════════════════════════════════════
_LOADERS = {
    'json': lambda text, cfg: load_json(text),
    'xml':  lambda text, cfg: xml_to_value(text),
    'csv':  lambda text, cfg: csv_to_value(text, cfg.csv_delimiter),
    'yaml': lambda text, cfg: yaml_to_value(text),
}

_DUMPERS = {
    'json': lambda value, indent, cfg: dump_json(value, indent),
    'xml':  lambda value, indent, cfg: value_to_xml(value, cfg.xml_root, indent),
    'csv':  lambda value, indent, cfg: value_to_csv(value, cfg.csv_delimiter),
    'yaml': lambda value, indent, cfg: value_to_yaml(value, indent),
}


def _check_format(fmt):
    key = fmt.strip().lower()
    if key not in _LOADERS:
        raise ValueError(f"不支持的格式: {fmt}")
    return key


def parse(fmt, text, config=DEFAULT_CONFIG) -> Result:
    """text → 通用值"""
    loader = _LOADERS[_check_format(fmt)]
    try:
        return Result.success(loader(text, config))
    except EngineFailure as e:
        logger.debug("解析 %s 失败: %s", fmt, e.error.kind.value)
        return Result.failure(e.error)


def serialize(fmt, value, indent=None, config=DEFAULT_CONFIG) -> Result:
    """通用值 → text"""
    dumper = _DUMPERS[_check_format(fmt)]
    try:
        return Result.success(dumper(value, indent, config))
    except EngineFailure as e:
        logger.debug("输出 %s 失败: %s", fmt, e.error.kind.value)
        return Result.failure(e.error)


def convert(text, from_fmt, to_fmt, indent=2, config=DEFAULT_CONFIG) -> Result:
    """将 text 从 from_fmt 转换为 to_fmt；同格式时相当于重新美化"""
    _check_format(to_fmt)
    parsed = parse(from_fmt, text, config)
    if not parsed.ok:
        return parsed
    return serialize(to_fmt, parsed.value, indent, config)
