from qrlogo.zones import Anchor, LogoRect, finder_zones, is_in_finder_zone, is_in_logo_zone, logo_cell_bounds


def test_three_finder_anchors():
    assert finder_zones(25) == (Anchor(0, 0), Anchor(0, 18), Anchor(18, 0))


def test_finder_zone_is_inclusive_eight_by_eight():
    zones = finder_zones(25)
    assert is_in_finder_zone(0, 0, zones)
    assert is_in_finder_zone(7, 7, zones)
    assert not is_in_finder_zone(8, 0, zones)
    assert not is_in_finder_zone(0, 8, zones)
    assert is_in_finder_zone(0, 24, zones)
    assert is_in_finder_zone(24, 7, zones)
    assert not is_in_finder_zone(12, 12, zones)


def test_bottom_right_corner_is_not_a_finder_zone():
    zones = finder_zones(25)
    assert not is_in_finder_zone(24, 24, zones)
    assert not is_in_finder_zone(21, 21, zones)


def test_logo_bounds_include_two_cell_margin():
    # 30x30 logo centred in a 150px body of 25 modules (6px cells)
    rect = LogoRect(60, 60, 30, 30)
    assert logo_cell_bounds(rect, 6) == (8, 16, 8, 16)
    assert is_in_logo_zone(8, 8, rect, 6)
    assert is_in_logo_zone(16, 16, rect, 6)
    assert is_in_logo_zone(12, 8, rect, 6)
    assert not is_in_logo_zone(7, 12, rect, 6)
    assert not is_in_logo_zone(12, 17, rect, 6)


def test_logo_zone_uses_rows_for_height_and_cols_for_width():
    rect = LogoRect(x=60, y=30, width=30, height=90)
    top, bottom, left, right = logo_cell_bounds(rect, 6)
    assert (top, bottom) == (3, 21)
    assert (left, right) == (8, 16)
    assert is_in_logo_zone(20, 12, rect, 6)
    assert not is_in_logo_zone(12, 20, rect, 6)


def test_no_logo_rect_never_excludes():
    assert not is_in_logo_zone(12, 12, None, 6)
