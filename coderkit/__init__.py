# -*- coding: utf-8 -*-
"""coderkit — 开发工具箱的格式转换 & 比对引擎

所有函数都是纯函数: 输入文本，返回 Result 或值对象，不保存任何状态。
"""

import logging

from .config import DEFAULT_CONFIG, EngineConfig, load_config
from .encoding import CODECS, decode, encode, process_encoding
from .formatter import LANGUAGES, MinifyStats, format_text, minify, minify_stats, validate_json
from .hashing import (
    CryptoProvider, DigestRequest, DigestResult, StandardCryptoProvider,
    compute, digest, digest_all, hmac,
)
from .jwt_tool import TokenExpiry, TokenParts, decode_token, get_expiry_info
from .keygen import KeyPair, generate_rsa_key_pair, generate_rsa_key_pair_async, to_pem
from .results import (
    CodecError, CodecResult, DiffError, ErrorKind, FormatError, ParseError,
    Result, SerializeError, TokenError, TransformError, TransformFailed,
)
from .string_diff import (
    ChangeKind, DiffSummary, LineDiffEntry, LineKind, StructuralDiffEntry,
    has_changes, json_diff, line_diff, structural_diff, summarize,
)
from .structured import FORMATS, convert, parse, serialize

__version__ = '1.0.0'

logging.getLogger(__name__).addHandler(logging.NullHandler())
