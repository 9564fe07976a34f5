import pytest

from fluxq.core.errors import SchemaConsistencyError
from fluxq.core.grammar import (
    AnnotationKind,
    DataType,
    annotation_kind_from_token,
    data_type_from_value,
    is_annotation_token,
    is_blank_line,
    is_error_header,
    parse_group_flag,
    split_csv_line,
)


@pytest.mark.parametrize(
    "code,expected",
    [
        ("long", DataType.LONG),
        ("unsignedLong", DataType.UNSIGNED_LONG),
        ("base64Binary", DataType.BASE64_BINARY),
        ("dateTime:RFC3339Nano", DataType.DATE_TIME_RFC3339_NANO),
        ("dateTime", DataType.DATE_TIME_RFC3339),
    ],
)
def test_data_type_from_value_known_codes(code: str, expected: DataType) -> None:
    assert data_type_from_value(code) is expected


def test_data_type_from_value_unknown_raises() -> None:
    with pytest.raises(SchemaConsistencyError):
        data_type_from_value("decimal")


def test_data_type_flags() -> None:
    assert DataType.STRING.is_textual
    assert DataType.BASE64_BINARY.is_textual
    assert not DataType.LONG.is_textual
    assert DataType.DATE_TIME_RFC3339_NANO.is_timestamp
    assert not DataType.DURATION.is_timestamp


def test_annotation_tokens() -> None:
    assert is_annotation_token("#datatype")
    assert not is_annotation_token("")
    assert annotation_kind_from_token("#group") is AnnotationKind.GROUP
    assert annotation_kind_from_token("#default") is AnnotationKind.DEFAULT
    # unknown '#' rows are comments, not errors
    assert annotation_kind_from_token("#generated-by") is None


def test_parse_group_flag_is_exact() -> None:
    assert parse_group_flag("true") is True
    assert parse_group_flag("false") is False
    with pytest.raises(SchemaConsistencyError):
        parse_group_flag("TRUE")


def test_split_csv_line_honours_quotes_and_delimiter() -> None:
    assert split_csv_line(',_result,"a,b",5') == ["", "_result", "a,b", "5"]
    assert split_csv_line(';x;"say ""hi"""', ";") == ["", "x", 'say "hi"']
    assert split_csv_line("") == []


def test_blank_line_vs_row_of_empty_cells() -> None:
    assert is_blank_line("")
    assert is_blank_line("   ")
    assert not is_blank_line(",,")


def test_is_error_header() -> None:
    assert is_error_header(["", "error", "reference"])
    assert not is_error_header(["", "result", "table"])
    assert not is_error_header(["", "error"])
