from core import data as dc
from core.filters import BusinessFilters
from core.metrics_debug import compute_debug


def test_debug_payload_counts(data_ctx):
    ctx = dc.prepare_context(BusinessFilters(zip_code="90046"), dict(data_ctx, keys_dropped=2))
    payload = compute_debug(ctx["filters"], ctx)
    assert payload["row_counts"] == {"businesses": 4, "filtered": 2}
    assert payload["cleaning_checks"] == {
        "invalid_keys_dropped": 2,
        "unplaceable_coordinates": 2,
        "blank_industry": 1,
        "blank_dba": 3,
    }
    assert [r["zip5"] for r in payload["zip_coverage"]] == ["90046", "90068", "90069"]
    assert payload["zip_coverage"][0]["rows"] == 2
    assert len(payload["sample"]) == 3


def test_debug_payload_on_failed_load():
    data_ctx = {"businesses": dc.empty_businesses(), "error": dc.LOAD_ERROR_MESSAGE}
    ctx = dc.prepare_context(BusinessFilters(), data_ctx)
    payload = compute_debug(ctx["filters"], ctx)
    assert payload["error"] == dc.LOAD_ERROR_MESSAGE
    assert payload["row_counts"] == {"businesses": 0, "filtered": 0}
    assert payload["zip_coverage"] == []
