# -*- coding: utf-8 -*-
"""编码/解码引擎 — 纯函数，无 UI 依赖

每个编解码器是一对 (编码函数, 解码函数)，输入输出都是 str。
单个函数遇到非法输入直接抛 ValueError；对外入口 encode / decode
把异常转换成 CodecResult，永远不会把异常抛给调用方。
"""

import base64
import html as html_lib
import logging
import re
import urllib.parse
from html.entities import codepoint2name

from .results import CodecError, CodecResult, ErrorKind, Result

logger = logging.getLogger(__name__)


# ── Base64 ───────────────────────────────────────────────────
def enc_base64(text):
    return base64.b64encode(text.encode('utf-8')).decode('ascii')

def dec_base64(text):
    # validate=True: 非字母表字符、padding 错误都会抛 binascii.Error
    return base64.b64decode(text.strip(), validate=True).decode('utf-8')

_B64URL_RE = re.compile(r'[A-Za-z0-9_-]*={0,2}')

def enc_base64url(text):
    return base64.urlsafe_b64encode(text.encode('utf-8')).decode('ascii').rstrip('=')

def b64url_to_bytes(segment):
    """Base64url 解码（padding 可省略），JWT 解析也用这个"""
    segment = segment.strip()
    if not _B64URL_RE.fullmatch(segment):
        raise ValueError("包含 Base64url 字母表以外的字符")
    segment = segment.rstrip('=')
    if len(segment) % 4 == 1:
        raise ValueError("Base64url 长度不合法")
    return base64.urlsafe_b64decode(segment + '=' * (-len(segment) % 4))

def dec_base64url(text):
    return b64url_to_bytes(text).decode('utf-8')


# ── URL (encodeURIComponent 语义) ────────────────────────────
# quote() 默认已保留 字母数字 和 _.-~
_URL_SAFE = "!*'()"
_BAD_PERCENT_RE = re.compile(r'%(?![0-9A-Fa-f]{2})')

def enc_url(text):
    return urllib.parse.quote(text, safe=_URL_SAFE)

def dec_url(text):
    m = _BAD_PERCENT_RE.search(text)
    if m:
        raise ValueError(f"位置 {m.start()} 处的 % 转义序列不完整")
    return urllib.parse.unquote(text, errors='strict')


# ── Hex / 二进制（按 UTF-8 字节，空格分隔）──────────────────
_HEX_TOKEN_RE = re.compile(r'[0-9A-Fa-f]{2}')
_BIN_TOKEN_RE = re.compile(r'[01]{8}')

def enc_hex(text):
    return ' '.join(format(b, '02x') for b in text.encode('utf-8'))

def dec_hex(text):
    tokens = text.split()
    for i, tok in enumerate(tokens, 1):
        if not _HEX_TOKEN_RE.fullmatch(tok):
            raise ValueError(f"第 {i} 组不是两位十六进制数: {tok!r}")
    return bytes(int(t, 16) for t in tokens).decode('utf-8')

def enc_binary(text):
    return ' '.join(format(b, '08b') for b in text.encode('utf-8'))

def dec_binary(text):
    tokens = text.split()
    for i, tok in enumerate(tokens, 1):
        if not _BIN_TOKEN_RE.fullmatch(tok):
            raise ValueError(f"第 {i} 组不是 8 位二进制数: {tok!r}")
    return bytes(int(t, 2) for t in tokens).decode('utf-8')


# ── HTML 实体 ────────────────────────────────────────────────
_HTML_BASIC = {
    '&': '&amp;', '<': '&lt;', '>': '&gt;', '"': '&quot;', "'": '&#39;',
}

def enc_html(text):
    out = []
    for ch in text:
        if ch in _HTML_BASIC:
            out.append(_HTML_BASIC[ch])
        elif ord(ch) > 0x7f and ord(ch) in codepoint2name:
            out.append(f'&{codepoint2name[ord(ch)]};')
        else:
            out.append(ch)
    return ''.join(out)

def dec_html(text):
    # 只做实体替换，不解析标签
    return html_lib.unescape(text)


# ── 反斜杠转义 ───────────────────────────────────────────────
_ESCAPE_MAP = {
    '\\': '\\\\', '"': '\\"', "'": "\\'",
    '\n': '\\n', '\r': '\\r', '\t': '\\t',
}
_UNESCAPE_MAP = {
    '\\': '\\', '"': '"', "'": "'",
    'n': '\n', 'r': '\r', 't': '\t',
}
_ESCAPE_RE = re.compile(r'[\\"\'\n\r\t]')
_UNESCAPE_RE = re.compile(r'\\([\\"\'nrt])')

def enc_backslash(text):
    return _ESCAPE_RE.sub(lambda m: _ESCAPE_MAP[m.group()], text)

def dec_backslash(text):
    # 单遍替换；不认识的 \x 序列原样保留
    return _UNESCAPE_RE.sub(lambda m: _UNESCAPE_MAP[m.group(1)], text)


# ── 方法注册表 ───────────────────────────────────────────────
# {名称: (编码函数, 解码函数)}
CODECS = {
    'base64':    (enc_base64, dec_base64),
    'base64url': (enc_base64url, dec_base64url),
    'url':       (enc_url, dec_url),
    'hex':       (enc_hex, dec_hex),
    'binary':    (enc_binary, dec_binary),
    'html':      (enc_html, dec_html),
    'backslash': (enc_backslash, dec_backslash),
}

CODEC_LABELS = {
    'base64':    'Base64',
    'base64url': 'Base64url',
    'url':       'URL 编码',
    'hex':       'Hex (Base16)',
    'binary':    '二进制',
    'html':      'HTML 实体',
    'backslash': '反斜杠转义',
}


def _lookup(codec):
    key = codec.strip().lower()
    if key not in CODECS:
        raise ValueError(f"不支持的编码方式: {codec}")
    return CODECS[key]


def _run(fn, text, direction):
    try:
        return Result.success(fn(text))
    except ValueError as e:
        # UnicodeError / binascii.Error 都是 ValueError 的子类
        logger.debug("%s %s 失败: %s", fn.__name__, direction, type(e).__name__)
        return Result.failure(CodecError(ErrorKind.INVALID_ENCODING, f"{direction}失败: {e}"))


def encode(codec, text) -> CodecResult:
    enc_fn, _ = _lookup(codec)
    return _run(enc_fn, text, '编码')


def decode(codec, text) -> CodecResult:
    _, dec_fn = _lookup(codec)
    return _run(dec_fn, text, '解码')


def process_encoding(codec: str, text: str, encode: bool) -> CodecResult:
    """统一入口: 根据方法名和方向执行编码/解码"""
    enc_fn, dec_fn = _lookup(codec)
    if encode:
        return _run(enc_fn, text, '编码')
    return _run(dec_fn, text, '解码')
