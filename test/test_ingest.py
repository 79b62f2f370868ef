import json
import logging

import pytest

from review_insights.errors import ParseError, UnsupportedFileType
from review_insights.ingest import (
    SchemaVariant, detect_variant, missing_extended_columns, parse_csv, parse_json, parse_upload,
)

AMAZON_HEADER = "Id,ProductId,UserId,ProfileName,HelpfulnessNumerator,HelpfulnessDenominator,Score,Time,Summary,Text"


def _csv(*lines):
    return ("\n".join(lines) + "\n").encode()


def test_missing_extended_columns(caplog):
    assert missing_extended_columns(AMAZON_HEADER.split(",") + ["Extra"]) == []
    assert missing_extended_columns(["ProductId", "Text", "Score", "Id"]) == [
        "HelpfulnessDenominator", "HelpfulnessNumerator", "ProfileName", "Summary", "Time", "UserId",
    ]

    with caplog.at_level(logging.INFO, logger="review_insights.ingest"):
        [r] = parse_csv(_csv("ProductId,Text,Score", "B001,tasty,4"))
    assert r.rating == 4
    assert r.helpfulness_numerator == 0
    assert "Time" in caplog.text


def test_detect_variant():
    assert detect_variant({"ProductId": "B001", "Text": "ok", "Score": "5"}) is SchemaVariant.EXTENDED
    assert detect_variant({"review_id": "1", "review_text": "ok"}) is SchemaVariant.SIMPLE
    # sentinel columns present but blank in the first row
    assert detect_variant({"ProductId": "", "Text": "ok", "Score": "5"}) is SchemaVariant.SIMPLE


def test_extended_layout_mapping():
    data = _csv(
        AMAZON_HEADER + ",Extra",
        '1,B001E4KFG0,A3SGXH7AUHU8GW,delmartian,1,2,5,1303862400,Good Quality,"Great taffy, great price",x',
    )
    [r] = parse_csv(data)
    assert r.review_id == "1"
    assert r.review_text == "Great taffy, great price"
    assert r.rating == 5
    assert r.product_id == r.product_name == "B001E4KFG0"
    assert r.user_id == "A3SGXH7AUHU8GW"
    assert r.profile_name == "delmartian"
    assert (r.helpfulness_numerator, r.helpfulness_denominator) == (1, 2)
    assert r.review_date == "2011-04-27T00:00:00.000Z"
    assert r.summary == "Good Quality"


def test_extended_layout_defaults():
    data = _csv(
        AMAZON_HEADER,
        "1,B001,u1,p,1,1,4,1303862400,s,first",
        ",B002,u2,p,x,,3,notatime,s,no id here",
        "3,B003,u3,p,0,0,,1303862400,s,missing score",
    )
    reviews = parse_csv(data)
    assert len(reviews) == 2
    second = reviews[1]
    assert second.review_id.startswith("amazon_")
    assert second.helpfulness_numerator == 0
    assert second.review_date.endswith("Z")


def test_simple_layout_mapping_and_row_filtering():
    data = _csv(
        "review_id,review_text,rating,product_name,user_id,review_date,summary",
        "r1,Loved it,5,Widget,u1,2024-01-02,nice",
        "r2,,3,Widget,u2,2024-01-03,",
        ",no id,2,Widget,u3,2024-01-04,",
        "r4,Meh,,,,,",
    )
    reviews = parse_csv(data)
    assert [r.review_id for r in reviews] == ["r1", "r4"]
    assert reviews[0].rating == 5
    assert reviews[0].review_date == "2024-01-02"
    assert reviews[1].rating == 0
    assert reviews[1].product_name == "Unknown Product"
    assert reviews[1].user_id == ""
    assert reviews[1].review_date


def test_csv_row_cap_keeps_first_rows_in_order():
    lines = ["review_id,review_text"] + [f"r{i},text number {i}" for i in range(10_005)]
    reviews = parse_csv(_csv(*lines))
    assert len(reviews) == 10_000
    assert reviews[0].review_id == "r0"
    assert reviews[-1].review_id == "r9999"


def test_csv_custom_cap():
    lines = ["review_id,review_text"] + [f"r{i},t" for i in range(50)]
    assert len(parse_csv(_csv(*lines), max_rows=7)) == 7


def test_csv_without_valid_rows_fails():
    with pytest.raises(ParseError):
        parse_csv(_csv("review_id,review_text", ",nothing", "r2,"))
    with pytest.raises(ParseError):
        parse_csv(_csv("foo,bar", "1,2"))
    with pytest.raises(ParseError):
        parse_csv(b"")


def test_json_array_and_wrapped_object():
    items = [
        {"review_id": 1, "review_text": "great", "rating": "4", "date": "2024-03-01"},
        {"review_id": "2", "review_text": "   "},
        {"review_text": "no id"},
        "not an object",
    ]
    bare = parse_json(json.dumps(items).encode())
    wrapped = parse_json(json.dumps({"reviews": items}).encode())
    for reviews in (bare, wrapped):
        assert len(reviews) == 1
        assert reviews[0].review_id == "1"
        assert reviews[0].rating == 4
        assert reviews[0].date == reviews[0].review_date == "2024-03-01"


def test_json_is_not_capped():
    items = [{"review_id": i, "review_text": "fine"} for i in range(10_005)]
    assert len(parse_json(json.dumps(items).encode())) == 10_005


def test_json_errors():
    with pytest.raises(ParseError):
        parse_json(b"{not json")
    with pytest.raises(ParseError, match="array"):
        parse_json(b'{"reviews": {"a": 1}}')
    with pytest.raises(ParseError):
        parse_json(b'{"items": []}')
    with pytest.raises(ParseError):
        parse_json(b'[{"review_id": "1"}]')


def test_parse_upload_dispatch():
    assert len(parse_upload(_csv("review_id,review_text", "a,b"), ".CSV")) == 1
    assert len(parse_upload(b'[{"review_id": "a", "review_text": "b"}]', "json")) == 1
    with pytest.raises(UnsupportedFileType):
        parse_upload(b"", ".txt")


def test_ragged_row_is_skipped_and_neighbours_kept():
    data = _csv(
        "review_id,review_text,rating",
        "r1,good tea,5",
        "r2,oops,3,extra,fields",
        "r3,fine tea,4",
    )
    reviews = parse_csv(data)
    assert [r.review_id for r in reviews] == ["r1", "r3"]
    assert [r.rating for r in reviews] == [5, 4]
