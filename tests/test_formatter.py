import pytest

from coderkit.formatter import (
    LANGUAGES, MinifyStats, format_text, minify, minify_stats, validate_json,
)
from coderkit.results import ErrorKind, FormatError

FORMAT_SAMPLES = {
    "json": '{"a": [1, 2, {"b": "x y"}], "c": null}',
    "xml": '<?xml version="1.0"?><root><a>1</a><b><c/></b></root>',
    "css": "/* base */\na{color:red;margin:0}\n@media (max-width:600px){a{color:blue}}",
    "sql": "select id, name from users u left join roles r on u.id = r.uid where id = 'a,  b' order by name;",
    "html": "<div><p>Hi</p><br><ul><li>a</li><li>b</li></ul><img src='x.png'/></div>",
}

MINIFY_SAMPLES = {
    "json": '{\n  "a": [1, 2],\n  "s": "keep  spaces"\n}',
    "xml": "<root>\n  <a>1</a>\n  <b>text  here</b>\n</root>",
    "css": "a { color : red ; margin: 0px; } /* c */ b > c { opacity: 0.5; content: \"x  ;  y\"; }",
    "sql": "SELECT  a,\n  b\nFROM t\nWHERE s = 'two  spaces'",
    "html": "<div>\n  <p> Hi  there </p>\n</div>",
    "javascript": 'function f(a, b) {\n  // add\n  return a + b; /* x */\n}\nvar s = "a // b";',
}


# ── 格式化 ───────────────────────────────────────────────────
@pytest.mark.parametrize("language", sorted(FORMAT_SAMPLES))
def test_format_is_idempotent(language):
    once = format_text(language, FORMAT_SAMPLES[language])
    assert once.ok
    twice = format_text(language, once.value)
    assert twice.value == once.value


def test_format_json_indent():
    assert format_text("json", '{"a":{"b":1}}', indent=4).value == '{\n    "a": {\n        "b": 1\n    }\n}'


def test_format_json_invalid():
    res = format_text("json", '{"a": 1,}')
    assert not res.ok
    assert isinstance(res.error, FormatError)
    assert res.error.kind == ErrorKind.INVALID_JSON


def test_format_xml():
    res = format_text("xml", "<root><a>1</a><b><c/></b></root>")
    assert res.value == "<root>\n  <a>1</a>\n  <b>\n    <c/>\n  </b>\n</root>"


def test_format_xml_keeps_declaration():
    res = format_text("xml", '<?xml version="1.0"?><root><a>1</a></root>')
    assert res.value == '<?xml version="1.0" encoding="UTF-8"?>\n<root>\n  <a>1</a>\n</root>'


def test_format_xml_malformed():
    res = format_text("xml", "<root><a></root>")
    assert res.error.kind == ErrorKind.MALFORMED_MARKUP


def test_format_css():
    res = format_text("css", "a{color:red;margin:0}b:hover{x:y}")
    assert res.value == "a {\n  color: red;\n  margin: 0;\n}\n\nb:hover {\n  x: y;\n}"


def test_format_css_nested_block():
    res = format_text("css", "@media (max-width:600px){a{color:red}}")
    assert res.value == "@media (max-width:600px) {\n  a {\n    color: red;\n  }\n}"


def test_format_sql():
    res = format_text("sql", "select id, name from users where id = 1 order by name")
    assert res.value == "SELECT id,\n  name\nFROM users\nWHERE id = 1\nORDER BY name"


def test_format_sql_keeps_literals():
    assert format_text("sql", "select 'a,  b from' from t").value == "SELECT 'a,  b from'\nFROM t"


def test_format_html():
    res = format_text("html", "<div><p>Hi</p><br><ul><li>a</li></ul></div>")
    assert res.value == "<div>\n  <p>Hi</p>\n  <br>\n  <ul>\n    <li>a</li>\n  </ul>\n</div>"


def test_format_unknown_language():
    with pytest.raises(ValueError):
        format_text("javascript", "var a = 1;")
    with pytest.raises(ValueError):
        format_text("cobol", "")


# ── 压缩 ─────────────────────────────────────────────────────
@pytest.mark.parametrize("language", LANGUAGES)
def test_minify_is_idempotent(language):
    once = minify(language, MINIFY_SAMPLES[language])
    assert minify(language, once) == once


def test_minify_json():
    assert minify("json", MINIFY_SAMPLES["json"]) == '{"a":[1,2],"s":"keep  spaces"}'


def test_minify_json_falls_back_on_invalid_input():
    assert minify("json", '{ "a b" : 1, }') == '{"a b":1,}'


def test_minify_xml():
    assert minify("xml", MINIFY_SAMPLES["xml"]) == "<root><a>1</a><b>text  here</b></root>"


def test_minify_css():
    assert (minify("css", MINIFY_SAMPLES["css"])
            == 'a{color:red;margin:0}b>c{opacity:.5;content:"x  ;  y"}')


def test_minify_sql():
    assert minify("sql", MINIFY_SAMPLES["sql"]) == "SELECT a, b FROM t WHERE s = 'two  spaces'"


def test_minify_html():
    assert minify("html", MINIFY_SAMPLES["html"]) == "<div><p> Hi there </p></div>"


def test_minify_js_drops_comments_keeps_strings():
    assert (minify("js", MINIFY_SAMPLES["javascript"])
            == 'function f(a,b){return a + b;}var s = "a // b";')


def test_minify_unknown_language():
    with pytest.raises(ValueError):
        minify("brainfuck", "+++")


# ── 辅助 ─────────────────────────────────────────────────────
def test_minify_stats():
    assert minify_stats("aaaa", "aa") == MinifyStats(4, 2, 2, 50.0)
    assert minify_stats("", "") == MinifyStats(0, 0, 0, 0.0)


def test_validate_json():
    assert validate_json('{"a": 1}') == (True, "有效的 JSON 对象，包含 1 个键")
    assert validate_json("[1, 2, 3]") == (True, "有效的 JSON 数组，包含 3 个元素")
    ok, message = validate_json('{"a": }')
    assert not ok
    assert "行 1" in message


def test_format_html_mixed_content_keeps_siblings_level():
    res = format_text("html", "<div><p>a</p>text</div><span>x</span>")
    assert res.value == "<div>\n  <p>a</p>text</div>\n<span>x</span>"


def test_format_html_top_level_text():
    res = format_text("html", "<b>a</b> and <i>b</i>")
    assert res.value == "<b>a</b>\nand\n<i>b</i>"
    assert format_text("html", res.value).value == res.value


def test_format_html_full_document():
    text = "<!DOCTYPE html><html><head><title>T</title></head><body><p>x</p></body></html>"
    res = format_text("html", text)
    assert res.value.startswith("<!DOCTYPE html>\n<html>\n  <head>")
    assert "\n    <p>x</p>\n" in res.value
    assert format_text("html", res.value).value == res.value


def test_format_xml_non_utf8_declaration():
    res = format_text("xml", '<?xml version="1.0" encoding="ISO-8859-1"?><r><a>é</a></r>')
    assert res.value == '<?xml version="1.0" encoding="UTF-8"?>\n<r>\n  <a>é</a>\n</r>'
