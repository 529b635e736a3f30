# -*- coding: utf-8 -*-
"""哈希/摘要引擎 — 纯函数，无 UI 依赖

MD5 / SHA-1 只为兼容其他工具的输出而保留，已不具备抗碰撞能力，
不要用于任何安全用途。

底层原语通过 CryptoProvider 取得，默认实现使用 hashlib / hmac /
cryptography，测试或特殊环境可以传入自己的实现。
"""

import abc
import hashlib
import hmac as hmac_module
import logging
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

logger = logging.getLogger(__name__)

HASH_METHODS = ['MD5', 'SHA1', 'SHA256', 'SHA512']

# 仅为兼容保留的弱算法
WEAK_ALGORITHMS = frozenset({'MD5', 'SHA1'})

_HASHLIB_MAP = {
    'MD5':    hashlib.md5,
    'SHA1':   hashlib.sha1,
    'SHA256': hashlib.sha256,
    'SHA512': hashlib.sha512,
}


@dataclass(frozen=True)
class DigestRequest:
    algorithm: str                  # MD5 / SHA1 / SHA256 / SHA512 / HMAC-<alg>
    input: bytes
    key: Optional[bytes] = None


@dataclass(frozen=True)
class DigestResult:
    hex: str
    byte_length: int


def normalize_algorithm(name: str) -> str:
    """'sha-256' / 'SHA256' / 'Sha_256' → 'SHA256'"""
    key = name.strip().upper().replace('-', '').replace('_', '')
    if key not in _HASHLIB_MAP:
        raise ValueError(f"不支持的哈希算法: {name}")
    return key


def _to_bytes(data):
    return data.encode('utf-8') if isinstance(data, str) else bytes(data)


# ══════════════════════════════════════════════════════════════
#  密码学原语提供者
# ══════════════════════════════════════════════════════════════
class CryptoProvider(abc.ABC):

    @abc.abstractmethod
    def digest(self, algorithm: str, data: bytes) -> bytes:
        ...

    @abc.abstractmethod
    def hmac(self, algorithm: str, key: bytes, data: bytes) -> bytes:
        ...

    @abc.abstractmethod
    def generate_asymmetric_key_pair(self, bits: int) -> tuple[bytes, bytes]:
        """返回 (PKCS#8 私钥 DER, SPKI 公钥 DER)"""


class StandardCryptoProvider(CryptoProvider):
    """hashlib / hmac / cryptography 实现"""

    def digest(self, algorithm, data):
        return _HASHLIB_MAP[algorithm](data).digest()

    def hmac(self, algorithm, key, data):
        return hmac_module.new(key, data, _HASHLIB_MAP[algorithm]).digest()

    def generate_asymmetric_key_pair(self, bits):
        priv_key = rsa.generate_private_key(public_exponent=65537, key_size=bits)
        priv_der = priv_key.private_bytes(
            serialization.Encoding.DER,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
        pub_der = priv_key.public_key().public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return priv_der, pub_der


DEFAULT_PROVIDER = StandardCryptoProvider()


# ══════════════════════════════════════════════════════════════
#  公共接口
# ══════════════════════════════════════════════════════════════
def digest(algorithm, data, provider: CryptoProvider = DEFAULT_PROVIDER) -> DigestResult:
    algo = normalize_algorithm(algorithm)
    raw = provider.digest(algo, _to_bytes(data))
    return DigestResult(raw.hex(), len(raw))


def hmac(algorithm, key, message, provider: CryptoProvider = DEFAULT_PROVIDER) -> DigestResult:
    algo = normalize_algorithm(algorithm)
    raw = provider.hmac(algo, _to_bytes(key), _to_bytes(message))
    return DigestResult(raw.hex(), len(raw))


def compute(request: DigestRequest, provider: CryptoProvider = DEFAULT_PROVIDER) -> DigestResult:
    """按 request.algorithm 分派: 'HMAC-' 前缀走 HMAC，其余走普通摘要"""
    name = request.algorithm.strip()
    if name.upper().startswith('HMAC'):
        if request.key is None:
            raise ValueError("HMAC 需要提供密钥")
        return hmac(name[4:].lstrip('-_ '), request.key, request.input, provider)
    return digest(name, request.input, provider)


def digest_all(data, provider: CryptoProvider = DEFAULT_PROVIDER) -> dict[str, DigestResult]:
    """一次计算所有支持的摘要"""
    return {name: digest(name, data, provider) for name in HASH_METHODS}
