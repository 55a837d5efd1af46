# tests/ui/test_viewport.py
from termi.ui.Viewport import Viewport


def test_clamp_scrolls_minimally_down_and_up():
    vp = Viewport(height=10, width=20)
    assert vp.clamp_to_cursor(12, 0) is True
    assert vp.scroll_row == 3
    assert vp.clamp_to_cursor(5, 0) is False
    assert vp.clamp_to_cursor(1, 0) is True
    assert vp.scroll_row == 1


def test_clamp_horizontal():
    vp = Viewport(height=10, width=20)
    vp.clamp_to_cursor(0, 25)
    assert vp.scroll_col == 6
    vp.clamp_to_cursor(0, 2)
    assert vp.scroll_col == 2


def test_locked_viewport_ignores_cursor():
    vp = Viewport(height=10, width=20)
    vp.scroll_lines(3, 100)
    assert vp.cursor_locked
    assert vp.clamp_to_cursor(0, 0) is False
    assert vp.scroll_row == 3
    vp.unlock()
    vp.clamp_to_cursor(0, 0)
    assert vp.scroll_row == 0


def test_scroll_bounds():
    vp = Viewport(height=10, width=20)
    assert vp.scroll_lines(-3, 100) is False
    vp.scroll_lines(500, 25)
    assert vp.scroll_row == 15
    short = Viewport(height=10, width=20)
    assert short.scroll_lines(3, 4) is False
    assert short.scroll_row == 0


def test_scroll_changed_tracks_committed_frame():
    vp = Viewport(height=5, width=5)
    assert not vp.scroll_changed
    vp.scroll_lines(3, 50)
    assert vp.scroll_changed
    vp.commit_frame()
    assert not vp.scroll_changed


def test_visible_rows_and_mapping():
    vp = Viewport(height=4, width=10)
    vp.scroll_row = 2
    assert list(vp.visible_rows(5)) == [2, 3, 4]
    assert vp.to_buffer(1, 3) == (3, 3)


def test_reset():
    vp = Viewport(height=4, width=10)
    vp.scroll_lines(3, 50)
    vp.scroll_col = 7
    vp.reset()
    assert (vp.scroll_row, vp.scroll_col, vp.cursor_locked) == (0, 0, False)
