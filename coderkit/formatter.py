# -*- coding: utf-8 -*-
"""格式化 / 压缩引擎 — 纯函数，无 UI 依赖

JSON / XML / HTML 走 lxml 或 json 真正解析后重新输出；CSS / SQL / JS 用正则
启发式改写，字符串字面量一律原样保留。启发式结果对任意输入不保证完美，
但对已经格式化过的同风格文本是幂等的。
"""

import logging
import re
from dataclasses import dataclass

from .results import EngineFailure, FormatError, Result
from .structured import dump_json, load_json
from .xml_tools import beautify_html, beautify_xml, minify_xml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MinifyStats:
    original: int
    minified: int
    saved: int
    percentage: float


def minify_stats(original: str, minified: str) -> MinifyStats:
    saved = len(original) - len(minified)
    pct = round(saved / len(original) * 100, 1) if original else 0.0
    return MinifyStats(len(original), len(minified), saved, pct)


# ── 工具: 只改写字面量以外的代码片段 ─────────────────────────
def _map_code(text, literal_re, fn, drop=None):
    """literal_re 匹配到的片段原样保留（drop 返回 True 的直接删除），
    其余片段交给 fn 处理"""
    out = []
    pos = 0
    for m in literal_re.finditer(text):
        out.append(fn(text[pos:m.start()]))
        if not (drop and drop(m.group())):
            out.append(m.group())
        pos = m.end()
    out.append(fn(text[pos:]))
    return ''.join(out)


def _keep(segment):
    return segment


def _is_block_comment(token):
    return token.startswith('/*')


# ══════════════════════════════════════════════════════════════
#  JSON
# ══════════════════════════════════════════════════════════════
_JSON_STRING_RE = re.compile(r'"(?:\\.|[^"\\])*"')


def format_json(text, indent=2):
    return dump_json(load_json(text), indent=indent)


def minify_json(text):
    """能解析就重新紧凑输出；解析失败则只去掉字符串以外的空白"""
    try:
        return dump_json(load_json(text))
    except EngineFailure:
        return _map_code(text, _JSON_STRING_RE, lambda s: re.sub(r'\s+', '', s))


def validate_json(text):
    """验证 JSON 是否合法，返回 (ok, message)"""
    try:
        obj = load_json(text)
    except EngineFailure as e:
        err = e.error
        if err.line is not None:
            return False, f"JSON 语法错误:\n行 {err.line}, 列 {err.column}: {err.message}"
        return False, err.message
    if isinstance(obj, dict):
        info = f"有效的 JSON 对象，包含 {len(obj)} 个键"
    elif isinstance(obj, list):
        info = f"有效的 JSON 数组，包含 {len(obj)} 个元素"
    else:
        info = f"有效的 JSON 值 (类型: {type(obj).__name__})"
    return True, info


# ══════════════════════════════════════════════════════════════
#  CSS
# ══════════════════════════════════════════════════════════════
_CSS_LITERAL_RE = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|/\*[\s\S]*?\*/')
_CSS_TOKEN_RE = re.compile(
    r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|/\*[\s\S]*?\*/|[{};]|[^"\'/{};]+|.',
    re.S)


def _squash(text):
    return re.sub(r'\s+', ' ', text).strip()


def _css_statements(text):
    """切分为 (类型, 内容): open / decl / close / comment"""
    buf = []
    for tok in _CSS_TOKEN_RE.findall(text):
        if tok.startswith('/*') and tok.endswith('*/') and len(tok) >= 4:
            if ''.join(buf).strip():
                buf.append(tok)
            else:
                buf = []
                yield 'comment', tok
        elif tok == '{':
            yield 'open', _squash(''.join(buf))
            buf = []
        elif tok == ';':
            stmt = _squash(''.join(buf))
            if stmt:
                yield 'decl', stmt
            buf = []
        elif tok == '}':
            stmt = _squash(''.join(buf))
            if stmt:
                yield 'decl', stmt
            buf = []
            yield 'close', ''
        else:
            buf.append(tok)
    stmt = _squash(''.join(buf))
    if stmt:
        yield 'decl', stmt


def _css_declaration(stmt, depth):
    if depth == 0 or stmt.startswith('@') or ':' not in stmt:
        return stmt
    prop, _, value = stmt.partition(':')
    return f'{prop.strip()}: {value.strip()}'


def beautify_css(text, indent=2):
    lines = []
    depth = 0
    for kind, content in _css_statements(text):
        pad = ' ' * (indent * depth)
        if kind == 'open':
            lines.append(f'{pad}{content} {{' if content else f'{pad}{{')
            depth += 1
        elif kind == 'decl':
            lines.append(f'{pad}{_css_declaration(content, depth)};')
        elif kind == 'close':
            depth = max(depth - 1, 0)
            lines.append(' ' * (indent * depth) + '}')
            if depth == 0:
                lines.append('')
        else:
            lines.append(pad + content)
    return '\n'.join(lines).strip('\n')


def _css_minify_code(segment):
    segment = re.sub(r'\s+', ' ', segment)
    segment = re.sub(r'\s*([{}:;,>])\s*', r'\1', segment)
    segment = re.sub(r';+}', '}', segment)
    segment = re.sub(r'(?<![\w.#-])0\.(\d)', r'.\1', segment)
    segment = re.sub(r':0(?:px|em|rem|%|vh|vw)(?![\w%.])', ':0', segment)
    return segment


def minify_css(text):
    # 先去注释，再整体压缩，保证幂等
    text = _map_code(text, _CSS_LITERAL_RE, _keep, drop=_is_block_comment)
    return _map_code(text, _CSS_LITERAL_RE, _css_minify_code).strip()


# ══════════════════════════════════════════════════════════════
#  SQL
# ══════════════════════════════════════════════════════════════
_SQL_LITERAL_RE = re.compile(
    r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|`[^`]*`|--[^\n]*\n?|/\*[\s\S]*?\*/")

SQL_KEYWORDS = [
    'INNER JOIN', 'LEFT JOIN', 'RIGHT JOIN', 'FULL JOIN', 'CROSS JOIN',
    'ORDER BY', 'GROUP BY', 'INSERT INTO', 'DELETE FROM', 'UNION ALL',
    'SELECT', 'FROM', 'WHERE', 'JOIN', 'HAVING', 'LIMIT', 'UNION',
    'VALUES', 'UPDATE', 'SET',
]
_SQL_KEYWORD_RE = re.compile(
    r'\s*\b(' + '|'.join(kw.replace(' ', r'\s+') for kw in SQL_KEYWORDS) + r')\b\s*',
    re.IGNORECASE)


def _sql_format_code(segment, indent):
    segment = re.sub(r'\s+', ' ', segment)
    segment = re.sub(r'\s*,\s*', ',\n' + ' ' * indent, segment)
    segment = _SQL_KEYWORD_RE.sub(
        lambda m: '\n' + ' '.join(m.group(1).upper().split()) + ' ', segment)
    segment = re.sub(r'\s*;\s*', ';\n', segment)
    return segment


def beautify_sql(text, indent=2):
    formatted = _map_code(text, _SQL_LITERAL_RE,
                          lambda s: _sql_format_code(s, indent))
    return '\n'.join(line.rstrip() for line in formatted.strip().split('\n'))


def minify_sql(text):
    return _map_code(text, _SQL_LITERAL_RE, lambda s: re.sub(r'\s+', ' ', s)).strip()


# ══════════════════════════════════════════════════════════════
#  HTML（美化见 xml_tools.beautify_html）
# ══════════════════════════════════════════════════════════════
def minify_html(text):
    text = re.sub(r'>\s+<', '><', text)
    return re.sub(r'\s+', ' ', text).strip()


# ══════════════════════════════════════════════════════════════
#  JavaScript（只压缩）
# ══════════════════════════════════════════════════════════════
_JS_LITERAL_RE = re.compile(
    r'"(?:\\.|[^"\\\n])*"|\'(?:\\.|[^\'\\\n])*\'|`(?:\\.|[^`\\])*`'
    r'|/\*[\s\S]*?\*/|//[^\n]*')


def _is_js_comment(token):
    return token.startswith(('/*', '//'))


def _js_minify_code(segment):
    segment = re.sub(r'\s+', ' ', segment)
    return re.sub(r'\s*([{}();,:])\s*', r'\1', segment)


def minify_js(text):
    text = _map_code(text, _JS_LITERAL_RE, _keep, drop=_is_js_comment)
    return _map_code(text, _JS_LITERAL_RE, _js_minify_code).strip()


# ══════════════════════════════════════════════════════════════
#  公共接口
# ══════════════════════════════════════════════════════════════
_FORMATTERS = {
    'json': format_json,
    'xml':  beautify_xml,
    'css':  beautify_css,
    'sql':  beautify_sql,
    'html': beautify_html,
}

_MINIFIERS = {
    'json':       minify_json,
    'xml':        minify_xml,
    'css':        minify_css,
    'sql':        minify_sql,
    'html':       minify_html,
    'javascript': minify_js,
}

_ALIASES = {'js': 'javascript'}

LANGUAGES = list(_MINIFIERS)


def _language(language, table):
    key = language.strip().lower()
    key = _ALIASES.get(key, key)
    if key not in table:
        raise ValueError(f"不支持的语言: {language}")
    return key


def format_text(language, text, indent=2) -> Result:
    """美化；JSON / XML 解析失败时返回 FormatError"""
    key = _language(language, _FORMATTERS)
    try:
        return Result.success(_FORMATTERS[key](text, indent))
    except EngineFailure as e:
        logger.debug("格式化 %s 失败: %s", key, e.error.kind.value)
        err = e.error
        return Result.failure(FormatError(err.kind, err.message))


def minify(language, text) -> str:
    """压缩；不会失败，无法解析时退化为去空白"""
    key = _language(language, _MINIFIERS)
    return _MINIFIERS[key](text)

