#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""coderkit 命令行入口

用法:
    python -m coderkit encode base64 "hello"
    python -m coderkit decode url "a%20b"
    echo '{"a":1}' | python -m coderkit format json --indent 4
    python -m coderkit convert csv json data.csv
    python -m coderkit diff a.txt b.txt --realign
    python -m coderkit jsondiff a.json b.json
    python -m coderkit hash "abc" --algorithm sha256
    python -m coderkit hmac sha256 secret "message"
    python -m coderkit rsa --bits 2048
    python -m coderkit jwt eyJhbGciOi...

文本参数省略或为 - 时从标准输入读取。
"""

import argparse
import json
import logging
import sys

from . import encoding, formatter, hashing, jwt_tool, keygen, string_diff, structured
from .config import RSA_KEY_SIZES, load_config

logger = logging.getLogger('coderkit')

_DIFF_MARKS = {
    string_diff.LineKind.EQUAL:   '  ',
    string_diff.LineKind.ADDED:   '+ ',
    string_diff.LineKind.REMOVED: '- ',
    string_diff.LineKind.CHANGED: '~ ',
}


# ── 输入 / 输出 ──────────────────────────────────────────────
def _read_text(value):
    if value is None or value == '-':
        return sys.stdin.read()
    return value


def _read_file(path):
    if path == '-':
        return sys.stdin.read()
    with open(path, encoding='utf-8') as f:
        return f.read()


def _fail(error):
    print(f"错误: {error}", file=sys.stderr)
    return 1


def _emit(result):
    if not result.ok:
        return _fail(result.error)
    print(result.value)
    return 0


def _dump(value):
    return json.dumps(value, ensure_ascii=False)


# ── 子命令 ───────────────────────────────────────────────────
def cmd_encode(args, config):
    return _emit(encoding.encode(args.codec, _read_text(args.text)))


def cmd_decode(args, config):
    return _emit(encoding.decode(args.codec, _read_text(args.text)))


def cmd_convert(args, config):
    indent = config.indent if args.indent is None else args.indent
    return _emit(structured.convert(
        _read_text(args.text), args.source, args.target, indent, config))


def cmd_format(args, config):
    indent = config.indent if args.indent is None else args.indent
    return _emit(formatter.format_text(args.language, _read_text(args.text), indent))


def cmd_minify(args, config):
    text = _read_text(args.text)
    result = formatter.minify(args.language, text)
    print(result)
    if args.stats:
        stats = formatter.minify_stats(text, result)
        print(f"原始 {stats.original} 字符, 压缩后 {stats.minified} 字符, "
              f"节省 {stats.saved} 字符 ({stats.percentage}%)", file=sys.stderr)
    return 0


def cmd_diff(args, config):
    entries = string_diff.line_diff(
        _read_file(args.file_a), _read_file(args.file_b), realign=args.realign)
    for entry in entries:
        mark = _DIFF_MARKS[entry.kind]
        if entry.kind == string_diff.LineKind.CHANGED:
            print(f"{entry.line_number:>4} {mark}{entry.before} → {entry.after}")
        else:
            line = entry.after if entry.kind == string_diff.LineKind.ADDED else entry.before
            print(f"{entry.line_number:>4} {mark}{line}")
    s = string_diff.summarize(entries)
    print(f"差异统计: 删除 {s.removed} 行, 新增 {s.added} 行, 修改 {s.changed} 行",
          file=sys.stderr)
    return 0


def cmd_jsondiff(args, config):
    result = string_diff.json_diff(
        _read_file(args.file_a), _read_file(args.file_b),
        index_sequences=args.index_sequences)
    if not result.ok:
        return _fail(result.error)
    if not result.value:
        print("两个 JSON 完全相同。")
    for entry in result.value:
        if entry.kind == string_diff.ChangeKind.ADDED:
            print(f"+ {entry.path}: {_dump(entry.new_value)}")
        elif entry.kind == string_diff.ChangeKind.REMOVED:
            print(f"- {entry.path}: {_dump(entry.old_value)}")
        else:
            print(f"~ {entry.path}: {_dump(entry.old_value)} → {_dump(entry.new_value)}")
    return 0


def _warn_weak(algorithm):
    if hashing.normalize_algorithm(algorithm) in hashing.WEAK_ALGORITHMS:
        print(f"注意: {algorithm.upper()} 已不安全，仅用于兼容校验", file=sys.stderr)


def cmd_hash(args, config):
    data = _read_text(args.text)
    if args.algorithm == 'all':
        for name, res in hashing.digest_all(data).items():
            print(f"{name:<7} {res.hex}")
    else:
        _warn_weak(args.algorithm)
        print(hashing.digest(args.algorithm, data).hex)
    return 0


def cmd_hmac(args, config):
    _warn_weak(args.algorithm)
    print(hashing.hmac(args.algorithm, args.key, _read_text(args.text)).hex)
    return 0


def cmd_rsa(args, config):
    bits = config.rsa_bits if args.bits is None else args.bits
    try:
        pair = keygen.generate_rsa_key_pair(bits, key_sizes=config.rsa_key_sizes)
    except ValueError as e:
        return _fail(e)
    print(pair.public_key_pem)
    print(pair.private_key_pem)
    return 0


def cmd_jwt(args, config):
    result = jwt_tool.decode_token(_read_text(args.token))
    if not result.ok:
        return _fail(result.error)
    parts = result.value
    print(f"=== Header ===\n{json.dumps(parts.header, indent=2, ensure_ascii=False)}")
    print(f"\n=== Payload ===\n{json.dumps(parts.payload, indent=2, ensure_ascii=False)}")
    print(f"\n=== Signature ===\n{parts.signature}")
    if isinstance(parts.payload, dict):
        known = [k for k in parts.payload if k in jwt_tool.CLAIM_DESCRIPTIONS]
        if known:
            print("\n=== Claims ===")
        for key in known:
            value = parts.payload[key]
            if key in ('exp', 'iat', 'nbf'):
                value = jwt_tool.format_timestamp(value)
            print(f"{key:<6} {jwt_tool.CLAIM_DESCRIPTIONS[key]}: {value}")
    expiry = jwt_tool.get_expiry_info(parts.payload)
    print(f"\n{expiry.message}")
    print(jwt_tool.DECODE_ONLY_WARNING, file=sys.stderr)
    return 0


# ── 参数解析 ─────────────────────────────────────────────────
def build_parser():
    parser = argparse.ArgumentParser(
        prog='coderkit',
        description="开发工具箱: 编码 / 格式化 / 转换 / 比对 / 摘要",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="输出调试日志")
    sub = parser.add_subparsers(dest='command', required=True)

    codecs = sorted(encoding.CODECS)
    codec_help = ', '.join(f"{c} ({encoding.CODEC_LABELS[c]})" for c in codecs)
    for name, fn, help_text in (('encode', cmd_encode, "编码"),
                                ('decode', cmd_decode, "解码")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("codec", choices=codecs, metavar="codec", help=codec_help)
        p.add_argument("text", nargs='?')
        p.set_defaults(func=fn)

    p = sub.add_parser('convert', help="结构化格式互转")
    p.add_argument("source", choices=structured.FORMATS)
    p.add_argument("target", choices=structured.FORMATS)
    p.add_argument("text", nargs='?')
    p.add_argument("--indent", type=int, default=None)
    p.set_defaults(func=cmd_convert)

    p = sub.add_parser('format', help="美化")
    p.add_argument("language", choices=['json', 'xml', 'css', 'sql', 'html'])
    p.add_argument("text", nargs='?')
    p.add_argument("--indent", type=int, default=None)
    p.set_defaults(func=cmd_format)

    p = sub.add_parser('minify', help="压缩")
    p.add_argument("language", choices=formatter.LANGUAGES + ['js'])
    p.add_argument("text", nargs='?')
    p.add_argument("--stats", action="store_true", help="在 stderr 输出压缩统计")
    p.set_defaults(func=cmd_minify)

    p = sub.add_parser('diff', help="逐行比对两个文件")
    p.add_argument("file_a")
    p.add_argument("file_b")
    p.add_argument("--realign", action="store_true",
                   help="按匹配块重新对齐（默认按行号对齐）")
    p.set_defaults(func=cmd_diff)

    p = sub.add_parser('jsondiff', help="结构比对两个 JSON 文件")
    p.add_argument("file_a")
    p.add_argument("file_b")
    p.add_argument("--index-sequences", action="store_true",
                   help="数组也按下标逐项比对")
    p.set_defaults(func=cmd_jsondiff)

    p = sub.add_parser('hash', help="计算摘要 (MD5 / SHA-1 仅为兼容)")
    p.add_argument("text", nargs='?')
    p.add_argument("--algorithm", default='sha256',
                   type=str.lower, choices=['md5', 'sha1', 'sha256', 'sha512', 'all'])
    p.set_defaults(func=cmd_hash)

    p = sub.add_parser('hmac', help="计算 HMAC")
    p.add_argument("algorithm", type=str.lower, choices=['md5', 'sha1', 'sha256', 'sha512'])
    p.add_argument("key")
    p.add_argument("text", nargs='?')
    p.set_defaults(func=cmd_hmac)

    p = sub.add_parser('rsa', help="生成 RSA 密钥对 (PEM)")
    p.add_argument("--bits", type=int, default=None,
                   help=f"密钥长度，可选 {' / '.join(str(b) for b in RSA_KEY_SIZES)}")
    p.set_defaults(func=cmd_rsa)

    p = sub.add_parser('jwt', help="解码 JWT（不验证签名）")
    p.add_argument("token", nargs='?')
    p.set_defaults(func=cmd_jwt)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    try:
        config = load_config()
    except ValueError as e:
        return _fail(e)
    logger.debug("配置: %s", config)
    try:
        return args.func(args, config)
    except OSError as e:
        return _fail(e)


if __name__ == '__main__':
    sys.exit(main())
