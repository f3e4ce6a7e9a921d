from route_engine.formatting import format_distance, format_duration


def test_format_distance_uses_meters_below_one_km() -> None:
    assert format_distance(0.85) == "850 m"
    assert format_distance(12.34) == "12.3 km"


def test_format_duration_variants() -> None:
    assert format_duration(25.4) == "25 min"
    assert format_duration(60) == "1h"
    assert format_duration(65) == "1h 5min"
    assert format_duration(119.8) == "2h"
