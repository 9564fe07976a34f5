from datetime import datetime, timezone

import polars as pl

from fluxq.io.frame import table_to_frame, tables_to_frame
from fluxq.io.lines import LineReader
from fluxq.io.parser import FluxCsvParser


def _tables(text: str):
    return FluxCsvParser(LineReader([text.encode()])).tables()


def test_table_dtypes_follow_schema() -> None:
    [table] = _tables(
        "#datatype,string,long,unsignedLong,double,boolean,dateTime:RFC3339\n"
        ",host,n,u,v,ok,_time\n"
        ",a,1,2,0.5,true,2024-01-01T00:00:00Z\n"
    )
    df = table_to_frame(table)
    assert df.schema == {
        "host": pl.Utf8,
        "n": pl.Int64,
        "u": pl.UInt64,
        "v": pl.Float64,
        "ok": pl.Boolean,
        "_time": pl.Datetime("us", "UTC"),
    }
    assert df.row(0)[:5] == ("a", 1, 2, 0.5, True)
    assert df["_time"][0] == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_empty_table_keeps_columns() -> None:
    [table] = _tables("#datatype,string,double\n,host,v\n")
    df = table_to_frame(table)
    assert df.height == 0
    assert df.columns == ["host", "v"]


def test_tables_concatenate_diagonally() -> None:
    tables = _tables(
        "#datatype,long,double\n,table,v\n,0,1.0\n\n"
        "#datatype,long,string\n,table,host\n,1,b\n"
    )
    df = tables_to_frame(tables)
    assert df.columns == ["table", "v", "host"]
    assert df.height == 2
    assert df["v"].to_list() == [1.0, None]
    assert df["host"].to_list() == [None, "b"]


def test_no_tables_gives_empty_frame() -> None:
    assert tables_to_frame([]).is_empty()
