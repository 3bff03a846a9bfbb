from core.selection import (
    LIST,
    MAP,
    ViewState,
    clear_selection,
    reconcile_selection,
    select_business,
    set_active_surface,
    toggle_stats,
)

KEYS = frozenset({"a", "b"})


def test_initial_state():
    state = ViewState()
    assert state.selected_key is None
    assert not state.has_selection
    assert state.active_surface == MAP
    assert state.show_stats is False


def test_select_from_list_switches_to_map():
    state = select_business(ViewState(active_surface=LIST), "a", KEYS)
    assert state.selected_key == "a"
    assert state.active_surface == MAP


def test_select_on_map_stays_on_map():
    state = select_business(ViewState(), "b", KEYS)
    assert state == ViewState(selected_key="b", active_surface=MAP)


def test_select_unknown_key_clears_selection():
    state = select_business(ViewState(selected_key="a"), "zzz", KEYS)
    assert state.selected_key is None
    assert select_business(ViewState(selected_key="a"), None, KEYS).selected_key is None


def test_select_unknown_key_does_not_change_surface():
    assert select_business(ViewState(active_surface=LIST), "zzz", KEYS).active_surface == LIST


def test_clear_selection_keeps_surface_and_stats():
    state = clear_selection(ViewState(selected_key="a", active_surface=LIST, show_stats=True))
    assert state == ViewState(selected_key=None, active_surface=LIST, show_stats=True)


def test_switching_surface_keeps_selection():
    state = set_active_surface(ViewState(selected_key="a"), LIST)
    assert state.selected_key == "a"
    assert state.active_surface == LIST
    assert set_active_surface(state, MAP).selected_key == "a"


def test_unknown_surface_falls_back_to_map():
    assert set_active_surface(ViewState(active_surface=LIST), "globe").active_surface == MAP


def test_toggle_stats():
    state = toggle_stats(ViewState())
    assert state.show_stats is True
    assert toggle_stats(state).show_stats is False


def test_reconcile_selection():
    assert reconcile_selection(ViewState(selected_key="a"), KEYS).selected_key == "a"
    assert reconcile_selection(ViewState(selected_key="gone"), KEYS).selected_key is None
    assert reconcile_selection(ViewState(selected_key="a"), frozenset()).selected_key is None
    assert reconcile_selection(ViewState(), KEYS) == ViewState()


def test_select_blank_key_clears_selection():
    assert select_business(ViewState(selected_key="a"), "", KEYS).selected_key is None
