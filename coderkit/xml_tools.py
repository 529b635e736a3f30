# -*- coding: utf-8 -*-
"""XML / HTML 转换 & 美化引擎 — 基于 lxml，纯函数，无 UI 依赖

功能:
    - XML → 通用值（dict / list / str）
    - 通用值 → XML
    - XML 美化 / 压缩
    - HTML 美化（lxml.html）

转换约定:
    - 属性放在保留键 "@attributes" 下
    - 同名兄弟元素合并为 list
    - 只有文本、没有属性的元素折叠为字符串
    - 既有文本又有属性/子元素时，文本放在 "#text" 下
    - 空元素为 {}
"""

import json
import re

from lxml import etree
from lxml import html as lxml_html

from .results import EngineFailure, ErrorKind, FormatError, ParseError, SerializeError

ATTRIBUTES_KEY = '@attributes'
TEXT_KEY = '#text'

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def _parser(remove_blank_text=False):
    # 输入已经是 str，统一按 UTF-8 字节解析，忽略文档自带的 encoding 声明
    # 不解析外部实体、不联网
    return etree.XMLParser(
        encoding='utf-8',
        remove_comments=True, remove_pis=True,
        remove_blank_text=remove_blank_text,
        resolve_entities=False, no_network=True,
    )


def _load(text, remove_blank_text=False):
    try:
        return etree.fromstring(text.strip().encode('utf-8'),
                                _parser(remove_blank_text))
    except etree.XMLSyntaxError as e:
        line, col = (e.position if e.position else (None, None))
        raise EngineFailure(ParseError(
            ErrorKind.MALFORMED_MARKUP, f"XML 结构错误: {e.msg}",
            line=line, column=col))


# ── XML → 通用值 ─────────────────────────────────────────────
def _tag_name(el):
    local = etree.QName(el).localname
    return f'{el.prefix}:{local}' if el.prefix else local


def _element_value(el):
    attrs = {etree.QName(k).localname: v for k, v in el.attrib.items()}
    children = []
    pieces = [el.text]
    for child in el:
        if isinstance(child.tag, str):
            children.append(child)
        pieces.append(child.tail)
    text = ' '.join(p.strip() for p in pieces if p and p.strip())

    if not children and not attrs:
        return text if text else {}

    obj = {}
    if attrs:
        obj[ATTRIBUTES_KEY] = attrs
    if text:
        obj[TEXT_KEY] = text
    for child in children:
        name = _tag_name(child)
        value = _element_value(child)
        if name not in obj:
            obj[name] = value
        elif isinstance(obj[name], list):
            obj[name].append(value)
        else:
            obj[name] = [obj[name], value]
    return obj


def xml_to_value(text):
    """解析 XML，返回文档根元素的内容（不含根元素名）"""
    return _element_value(_load(text))


# ── 通用值 → XML ─────────────────────────────────────────────
def _scalar_text(value):
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _fill(el, value):
    if value is None:
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if key == ATTRIBUTES_KEY and isinstance(item, dict):
                for attr, attr_value in item.items():
                    el.set(attr, '' if attr_value is None else _scalar_text(attr_value))
            elif key == TEXT_KEY:
                el.text = '' if item is None else _scalar_text(item)
            elif isinstance(item, list):
                for entry in item:
                    _fill(etree.SubElement(el, key), entry)
            else:
                _fill(etree.SubElement(el, key), item)
    elif isinstance(value, list):
        for entry in value:
            _fill(etree.SubElement(el, 'item'), entry)
    else:
        el.text = _scalar_text(value)


def value_to_xml(value, root='root', indent=None):
    """把通用值包在 <root> 里输出为 XML 字符串"""
    try:
        el = etree.Element(root)
        _fill(el, value)
    except ValueError as e:
        # 非法标签名 / 属性名 / 控制字符
        raise EngineFailure(SerializeError(
            ErrorKind.STRUCTURAL_VIOLATION, f"无法生成 XML: {e}"))
    except RecursionError:
        raise EngineFailure(SerializeError(
            ErrorKind.STRUCTURAL_VIOLATION, "嵌套层级过深，无法生成 XML"))
    if indent:
        etree.indent(el, space=' ' * indent)
    return etree.tostring(el, encoding='unicode')


# ── XML 美化 / 压缩 ──────────────────────────────────────────
def beautify_xml(text, indent=2):
    root = _load(text, remove_blank_text=True)
    etree.indent(root, space=' ' * indent)
    result = etree.tostring(root, encoding='unicode')
    if text.lstrip().startswith('<?xml'):
        result = f'{XML_DECLARATION}\n{result}'
    return result


def minify_xml(text):
    return re.sub(r'>\s+<', '><', text.strip())


# ── HTML 美化 ────────────────────────────────────────────────
_FULL_DOC_RE = re.compile(r'\s*<(!doctype|html)\b', re.IGNORECASE)


def _html_element(el, space):
    etree.indent(el, space=space)
    return etree.tostring(el, encoding='unicode', method='html', with_tail=False)


def beautify_html(text, indent=2):
    """将压缩的 HTML 格式化为缩进排版的多行 HTML。"""
    text = text.strip()
    if not text:
        return ''
    space = ' ' * indent

    try:
        # 判断是完整文档还是片段
        if _FULL_DOC_RE.match(text):
            doc = lxml_html.document_fromstring(text)
            result = _html_element(doc, space)
            doctype = doc.getroottree().docinfo.doctype
            return f'{doctype}\n{result}' if doctype else result

        # 片段: 可能包含多个顶级元素，顶级元素之间的文本单独成行
        parts = []
        for frag in lxml_html.fragments_fromstring(text):
            if isinstance(frag, str):
                if frag.strip():
                    parts.append(frag.strip())
                continue
            parts.append(_html_element(frag, space))
            if frag.tail and frag.tail.strip():
                parts.append(frag.tail.strip())
        return '\n'.join(parts)
    except (etree.ParserError, etree.XMLSyntaxError) as e:
        raise EngineFailure(FormatError(
            ErrorKind.MALFORMED_MARKUP, f"HTML 解析失败: {e}"))
