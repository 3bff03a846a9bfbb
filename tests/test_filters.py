import pytest

from core.filters import (
    ALL_ZIPS,
    BusinessFilters,
    filter_businesses,
    matches_filters,
    normalize_filters,
    reset_filters,
)


def _keys(df):
    return df["location_account"].tolist()


def test_empty_predicate_returns_everything_in_order(businesses):
    out = filter_businesses(businesses, BusinessFilters(search_text="", zip_code=ALL_ZIPS))
    assert _keys(out) == _keys(businesses)


def test_search_is_case_insensitive_across_name_dba_and_industry(businesses):
    assert _keys(filter_businesses(businesses, BusinessFilters(search_text="retail"))) == [
        "0000001-0001-1",
        "0000002-0001-1",
    ]
    assert _keys(filter_businesses(businesses, BusinessFilters(search_text="Vinyl"))) == ["0000001-0001-1"]
    assert _keys(filter_businesses(businesses, BusinessFilters(search_text="weho"))) == ["0000003-0001-1"]


def test_search_text_is_literal_not_regex(businesses):
    assert filter_businesses(businesses, BusinessFilters(search_text="(")).empty
    assert filter_businesses(businesses, BusinessFilters(search_text=".*")).empty


def test_zip_selector_matches_prefix_including_suffix(businesses):
    out = filter_businesses(businesses, BusinessFilters(zip_code="90046"))
    assert _keys(out) == ["0000001-0001-1", "0000004-0001-1"]


def test_zip_selector_outside_allow_list_is_empty_not_error(businesses):
    assert filter_businesses(businesses, BusinessFilters(zip_code="10001")).empty


def test_search_and_zip_are_combined_with_and(businesses):
    out = filter_businesses(businesses, BusinessFilters(search_text="retail", zip_code="90068"))
    assert _keys(out) == ["0000002-0001-1"]


@pytest.mark.parametrize(
    "filters",
    [
        BusinessFilters(),
        BusinessFilters(search_text="re"),
        BusinessFilters(search_text="BLVD"),
        BusinessFilters(zip_code="90069"),
        BusinessFilters(search_text="a", zip_code="90046"),
    ],
)
def test_filter_is_subset_rechecked_and_idempotent(businesses, filters):
    out = filter_businesses(businesses, filters)
    assert set(_keys(out)) <= set(_keys(businesses))
    for rec in out.to_dict(orient="records"):
        assert matches_filters(rec, filters)
    rejected = businesses[~businesses["location_account"].isin(_keys(out))]
    for rec in rejected.to_dict(orient="records"):
        assert not matches_filters(rec, filters)
    assert _keys(filter_businesses(out, filters)) == _keys(out)


def test_filter_on_empty_frame(businesses):
    empty = businesses.iloc[0:0]
    assert filter_businesses(empty, BusinessFilters(search_text="x")).empty


def test_matches_filters_tolerates_missing_fields():
    assert matches_filters({"business_name": "ACME"}, BusinessFilters(search_text="acme"))
    assert not matches_filters({"business_name": None}, BusinessFilters(search_text="acme"))
    assert matches_filters({}, BusinessFilters())


def test_normalize_filters_defaults_and_clamping():
    f = normalize_filters({"search_text": None, "zip_code": "", "top_n": "abc"})
    assert f == BusinessFilters()
    assert normalize_filters({"top_n": 500}).top_n == 50
    assert normalize_filters({"top_n": 0}).top_n == 1
    assert normalize_filters(None) == BusinessFilters()


def test_normalize_filters_keeps_search_text_verbatim():
    assert normalize_filters({"search_text": " Retail "}).search_text == " Retail "


def test_reset_filters():
    assert reset_filters() == BusinessFilters(search_text="", zip_code=ALL_ZIPS)
