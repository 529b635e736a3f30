import pytest

from coderkit.results import (
    CodecError, ErrorKind, ParseError, Result, TransformFailed,
)


def test_success_and_failure():
    ok = Result.success(42)
    assert ok.ok and ok.value == 42 and ok.error is None
    err = CodecError(ErrorKind.INVALID_ENCODING, "bad")
    failed = Result.failure(err)
    assert not failed.ok and failed.value is None and failed.error is err


def test_unwrap():
    assert Result.success("x").unwrap() == "x"
    err = CodecError(ErrorKind.INVALID_ENCODING, "bad")
    with pytest.raises(TransformFailed) as info:
        Result.failure(err).unwrap()
    assert info.value.error is err
    assert isinstance(info.value, ValueError)


def test_error_str():
    assert str(CodecError(ErrorKind.INVALID_ENCODING, "bad")) == "[InvalidEncoding] bad"
    located = ParseError(ErrorKind.INVALID_JSON, "oops", line=2, column=5)
    assert str(located) == "[InvalidJson] 第 2 行, 第 5 列: oops"


def test_error_kind_is_str():
    assert ErrorKind.STRUCTURAL_VIOLATION == "StructuralViolation"
