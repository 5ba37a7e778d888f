import pytest

from lenkit.errors import InvalidArgument
from lenkit.lengths import (
    Champion, ExactLength, LengthRange, build_predicate, cell_value,
    count_by_length, extreme_length, filter_rows, parse_mode,
)
from lenkit.utils.columns import ColumnRef, resolve_column
from lenkit.utils.io import Row, iter_rows, load_delimited

CITIES = "Name,City\nAnn,Rome\nBo,NYC\nCara,LA\n"


def _city(table):
    return resolve_column(table.header, "City")


def test_iter_rows_numbers_from_two_and_skips_blank_lines():
    rows = list(iter_rows(["a,b", "", "c,d"], ","))
    assert [r.line for r in rows] == [2, 4]
    assert rows[1].fields == ("c", "d")


def test_cell_value_normalizes_and_short_rows_are_none():
    col = ColumnRef("City", 1)
    assert cell_value(Row(2, ("Ann", ' "Rome" ')), col) == "Rome"
    assert cell_value(Row(3, ("Bo",)), col) is None


def test_count_by_length_scenario():
    t = load_delimited(CITIES)
    assert count_by_length(t.rows, _city(t)) == {4: 1, 3: 1, 2: 1}


def test_count_by_length_counts_code_points_and_skips_short_rows():
    t = load_delimited("k,v\n1,héllo\n2\n3,日本\n4,\n")
    assert count_by_length(t.rows, resolve_column(t.header, "v")) == {5: 1, 2: 1, 0: 1}


def test_extreme_min_scenario():
    t = load_delimited(CITIES)
    champ = extreme_length(t.rows, _city(t), "min")
    assert champ.length == 2
    assert champ.values == {"LA": [4]}


def test_extreme_max_dedups_values_and_accumulates_lines():
    t = load_delimited("id,w\n1,aa\n2,bbb\n3,ccc\n4,bbb\n5,a\n6,\"ccc\"\n")
    champ = extreme_length(t.rows, resolve_column(t.header, "w"), "max")
    assert champ.length == 3
    assert champ.values == {"bbb": [3, 5], "ccc": [4, 7]}


def test_champion_discards_superseded_length():
    c = Champion(mode="min")
    c = c.offer("abc", 2).offer("xyz", 3)
    assert c.values == {"abc": [2], "xyz": [3]}
    c = c.offer("q", 4)
    assert c.length == 1 and c.values == {"q": [4]}
    assert c.offer("longer", 5) is c


def test_champion_invariant_holds_against_every_row():
    t = load_delimited("v\nabcd\nab\nabcdef\nxy\nz\nzz\n")
    col = resolve_column(t.header, "v")
    lengths = [len(cell_value(r, col)) for r in t.rows]
    for mode, best in (("min", min(lengths)), ("max", max(lengths))):
        champ = extreme_length(t.rows, col, mode)
        assert champ.length == best
        assert all(len(v) == best for v in champ.values)
        reported = {ln for lines in champ.values.values() for ln in lines}
        assert reported == {r.line for r in t.rows if len(cell_value(r, col)) == best}


def test_extreme_without_rows():
    t = load_delimited("v\n")
    champ = extreme_length(t.rows, resolve_column(t.header, "v"), "max")
    assert champ.length is None and champ.values == {}


def test_parse_mode():
    assert parse_mode("MAX") == "max"
    assert parse_mode(None) == "min"
    with pytest.raises(InvalidArgument):
        parse_mode("median")


def test_build_predicate_variants():
    assert build_predicate(length="3") == ExactLength(3)
    assert build_predicate(min_length="1") == LengthRange(1, None)
    assert build_predicate(max_length=4) == LengthRange(None, 4)
    assert build_predicate(min_length="2", max_length="2") == LengthRange(2, 2)


@pytest.mark.parametrize("kwargs", [
    dict(length="3", min_length="1"),
    dict(length="3", max_length="9"),
    dict(),
    dict(length="abc"),
    dict(min_length="-1"),
    dict(max_length="2.5"),
    dict(min_length="5", max_length="2"),
])
def test_build_predicate_rejects(kwargs):
    with pytest.raises(InvalidArgument):
        build_predicate(**kwargs)


def test_filter_exact_scenario():
    t = load_delimited(CITIES)
    rows = filter_rows(t.rows, _city(t), build_predicate(length="3"))
    assert [(r.line, r.fields) for r in rows] == [(3, ("Bo", "NYC"))]


def test_filter_range_matches_predicate_and_keeps_order():
    t = load_delimited("c\nabc\n\nab\nabcdef\na\nabcd\n")
    col = resolve_column(t.header, "c")
    pred = build_predicate(min_length="2", max_length="4")
    rows = filter_rows(t.rows, col, pred)
    assert [r.line for r in rows] == [2, 4, 7]
    kept = {r.line for r in rows}
    for r in t.rows:
        assert (r.line in kept) == (2 <= len(cell_value(r, col)) <= 4)
