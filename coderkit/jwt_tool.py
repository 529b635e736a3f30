# -*- coding: utf-8 -*-
"""JWT 解析工具（纯本地，不验证签名，只解码）

支持解码 Header / Payload，检查过期时间。
签名段原样返回，没有做任何校验 —— 解码成功不代表 token 可信。
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from .encoding import b64url_to_bytes
from .results import EngineFailure, ErrorKind, Result, TokenError
from .structured import load_json

logger = logging.getLogger(__name__)

DECODE_ONLY_WARNING = "仅解码，未验证签名：不要根据解码结果信任该 token"

_PREFIXES = ('Bearer ', 'bearer ', 'TOKEN ')


@dataclass(frozen=True)
class TokenParts:
    header: Any
    payload: Any
    signature: str
    raw: tuple[str, str, str]


@dataclass(frozen=True)
class TokenExpiry:
    status: str                     # no_exp | valid | expired | not_yet_valid
    exp: Optional[float] = None
    iat: Optional[float] = None
    nbf: Optional[float] = None
    seconds: Optional[int] = None   # 剩余 / 已过期 / 距生效 的秒数

    @property
    def message(self):
        if self.status == 'not_yet_valid':
            return f'未生效（还差 {self.seconds} 秒）'
        if self.status == 'no_exp':
            return '无过期时间（永久有效）'
        if self.status == 'expired':
            return f'已过期（{_humanize(self.seconds)}前）'
        return f'有效（还剩 {_humanize(self.seconds)}）'


def _humanize(seconds):
    if seconds < 60:
        return f'{seconds} 秒'
    if seconds < 3600:
        return f'{seconds // 60} 分钟'
    if seconds < 86400:
        return f'{seconds // 3600} 小时'
    return f'{seconds // 86400} 天'


def _decode_segment(segment, label):
    try:
        raw = b64url_to_bytes(segment).decode('utf-8')
    except ValueError as e:
        raise EngineFailure(TokenError(
            ErrorKind.INVALID_ENCODING, f"{label} 不是合法的 Base64url: {e}"))
    try:
        return load_json(raw)
    except EngineFailure as e:
        raise EngineFailure(TokenError(
            ErrorKind.INVALID_JSON, f"{label} 不是合法的 JSON: {e.error.message}"))


def decode_token(raw: str) -> Result:
    """解码 JWT，返回 Result[TokenParts]。

    不验证签名，纯本地解码。
    """
    token = raw.strip()
    # 移除常见前缀
    for prefix in _PREFIXES:
        if token.startswith(prefix):
            token = token[len(prefix):].strip()
            break

    parts = token.split('.')
    if len(parts) != 3:
        logger.debug("JWT 段数不对: %d", len(parts))
        return Result.failure(TokenError(
            ErrorKind.MALFORMED_TOKEN,
            f"无效的 JWT 格式：应为 3 段（header.payload.signature），实际 {len(parts)} 段"))
    try:
        header = _decode_segment(parts[0], 'Header')
        payload = _decode_segment(parts[1], 'Payload')
    except EngineFailure as e:
        logger.debug("JWT 解码失败: %s", e.error.kind.value)
        return Result.failure(e.error)

    return Result.success(TokenParts(header, payload, parts[2], tuple(parts)))


def _timestamp(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def get_expiry_info(payload, now: Optional[float] = None) -> TokenExpiry:
    """分析 Payload 中的 exp / iat / nbf"""
    if now is None:
        now = time.time()
    claims = payload if isinstance(payload, dict) else {}
    exp = _timestamp(claims.get('exp'))
    iat = _timestamp(claims.get('iat'))
    nbf = _timestamp(claims.get('nbf'))

    if nbf is not None and now < nbf:
        return TokenExpiry('not_yet_valid', exp, iat, nbf, int(nbf - now))
    if exp is None:
        return TokenExpiry('no_exp', exp, iat, nbf)
    if now > exp:
        return TokenExpiry('expired', exp, iat, nbf, int(now - exp))
    return TokenExpiry('valid', exp, iat, nbf, int(exp - now))


def format_timestamp(ts) -> str:
    if ts is None:
        return ''
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')
    except (OverflowError, OSError, TypeError, ValueError):
        return str(ts)


# ── 常见 Payload 字段说明 ─────────────────────────────────────
CLAIM_DESCRIPTIONS = {
    'iss': '签发方 (Issuer)',
    'sub': '主题/用户 (Subject)',
    'aud': '接收方 (Audience)',
    'exp': '过期时间 (Expiration)',
    'nbf': '生效时间 (Not Before)',
    'iat': '签发时间 (Issued At)',
    'jti': 'JWT 唯一 ID (JWT ID)',
    'name':  '用户姓名',
    'email': '邮箱',
    'role':  '角色',
    'scope': '权限范围',
}
