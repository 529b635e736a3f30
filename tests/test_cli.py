import io

import pytest

from coderkit.__main__ import main

TOKEN = "eyJhbGciOiJIUzI1NiJ9.eyJzdWIiOiIxMjMifQ.sig"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CODERKIT_INDENT", "CODERKIT_XML_ROOT", "CODERKIT_RSA_BITS"):
        monkeypatch.delenv(name, raising=False)


def test_encode(capsys):
    assert main(["encode", "base64", "hello"]) == 0
    assert capsys.readouterr().out == "aGVsbG8=\n"


def test_decode_failure_goes_to_stderr(capsys):
    assert main(["decode", "base64", "not base64!"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "InvalidEncoding" in captured.err


def test_format_reads_stdin(capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO('{"a":1}'))
    assert main(["format", "json"]) == 0
    assert capsys.readouterr().out == '{\n  "a": 1\n}\n'


def test_convert_uses_env_indent(capsys, monkeypatch):
    monkeypatch.setenv("CODERKIT_INDENT", "4")
    assert main(["convert", "csv", "json", "a,b\n1,2"]) == 0
    assert capsys.readouterr().out == '[\n    {\n        "a": "1",\n        "b": "2"\n    }\n]\n'


def test_bad_env_config(capsys, monkeypatch):
    monkeypatch.setenv("CODERKIT_RSA_BITS", "123")
    assert main(["encode", "hex", "x"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "123" in captured.err


def test_minify_with_stats(capsys):
    assert main(["minify", "css", "a { color : red; }", "--stats"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "a{color:red}\n"
    assert "节省" in captured.err


def test_diff_files(capsys, tmp_path):
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    a.write_text("a\nb\nc", encoding="utf-8")
    b.write_text("a\nx\nc", encoding="utf-8")
    assert main(["diff", str(a), str(b)]) == 0
    captured = capsys.readouterr()
    assert "~ b → x" in captured.out
    assert "修改 1 行" in captured.err


def test_diff_missing_file(capsys, tmp_path):
    assert main(["diff", str(tmp_path / "nope"), str(tmp_path / "nope2")]) == 1
    assert "错误" in capsys.readouterr().err


def test_jsondiff(capsys, tmp_path):
    a = tmp_path / "a.json"
    b = tmp_path / "b.json"
    a.write_text('{"a": 1, "b": {"c": 2}}', encoding="utf-8")
    b.write_text('{"a": 1, "b": {"c": 3}, "d": true}', encoding="utf-8")
    assert main(["jsondiff", str(a), str(b)]) == 0
    assert capsys.readouterr().out == "~ b.c: 2 → 3\n+ d: true\n"


def test_hash_and_hmac(capsys):
    assert main(["hash", "abc"]) == 0
    assert capsys.readouterr().out.startswith("ba7816bf")
    assert main(["hmac", "SHA256", "key", "The quick brown fox jumps over the lazy dog"]) == 0
    assert capsys.readouterr().out.strip().startswith("f7bc83f4")


def test_weak_hash_warns(capsys):
    assert main(["hash", "abc", "--algorithm", "md5"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "900150983cd24fb0d6963f7d28e17f72\n"
    assert "MD5" in captured.err


def test_hash_all(capsys):
    assert main(["hash", "abc", "--algorithm", "all"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split()[0] for line in lines] == ["MD5", "SHA1", "SHA256", "SHA512"]


def test_jwt(capsys):
    assert main(["jwt", TOKEN]) == 0
    captured = capsys.readouterr()
    assert '"alg": "HS256"' in captured.out
    assert '"sub": "123"' in captured.out
    assert "sub    主题/用户 (Subject): 123" in captured.out
    assert "未验证签名" in captured.err


def test_jwt_timestamps_are_readable(capsys):
    # {"alg":"HS256"} / {"iat":0}
    assert main(["jwt", "eyJhbGciOiJIUzI1NiJ9.eyJpYXQiOjB9.sig"]) == 0
    assert "1970-01-01 00:00:00 UTC" in capsys.readouterr().out


def test_jwt_malformed(capsys):
    assert main(["jwt", "a.b"]) == 1
    assert "MalformedToken" in capsys.readouterr().err


def test_rsa(capsys):
    assert main(["rsa", "--bits", "1024"]) == 0
    out = capsys.readouterr().out
    assert "-----BEGIN PUBLIC KEY-----" in out
    assert "-----END PRIVATE KEY-----" in out


def test_unknown_codec_rejected_by_parser():
    with pytest.raises(SystemExit):
        main(["encode", "rot13", "x"])


def test_rsa_rejects_size_outside_config(capsys):
    assert main(["rsa", "--bits", "512"]) == 1
    assert "512" in capsys.readouterr().err
