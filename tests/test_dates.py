import pytest
from datetime import date
from capacity_planner.models.entities import DateInterval, Sprint
from capacity_planner.services.dates import (
    contains,
    format_date_range,
    group_sprints_by_quarter,
    overlap,
    quarter_label,
    working_days,
)


def interval(start, end):
    return DateInterval(start_date=start, end_date=end)


@pytest.mark.parametrize("start,end,expected", [
    (date(2025, 1, 6), date(2025, 1, 17), 10),   # duas semanas, segunda a sexta
    (date(2025, 1, 4), date(2025, 1, 5), 0),     # sábado e domingo
    (date(2025, 1, 8), date(2025, 1, 8), 1),     # um único dia útil
    (date(2025, 1, 10), date(2025, 1, 13), 2),   # sexta a segunda
    (date(2025, 1, 1), date(2025, 12, 31), 261),
])
def test_working_days(start, end, expected):
    """Testa a contagem de dias úteis"""
    assert working_days(interval(start, end)) == expected


def test_working_days_matches_day_by_day_count():
    """Testa a contagem contra uma iteração dia a dia"""
    start = date(2025, 3, 1)
    for length in range(0, 30):
        end = date.fromordinal(start.toordinal() + length)
        expected = sum(
            1 for d in range(start.toordinal(), end.toordinal() + 1)
            if date.fromordinal(d).weekday() < 5
        )
        assert working_days(interval(start, end)) == expected


def test_overlap_intersection():
    """Testa a interseção de intervalos sobrepostos"""
    result = overlap(interval(date(2025, 1, 6), date(2025, 1, 17)), interval(date(2025, 1, 15), date(2025, 1, 24)))
    assert result == interval(date(2025, 1, 15), date(2025, 1, 17))


def test_overlap_touching_endpoints():
    """Testa que extremidades que se tocam contam como sobreposição"""
    result = overlap(interval(date(2025, 1, 6), date(2025, 1, 17)), interval(date(2025, 1, 17), date(2025, 1, 20)))
    assert result == interval(date(2025, 1, 17), date(2025, 1, 17))


def test_overlap_disjoint():
    """Testa intervalos disjuntos"""
    assert overlap(interval(date(2025, 1, 6), date(2025, 1, 17)), interval(date(2025, 1, 18), date(2025, 1, 20))) is None


def test_contains_is_inclusive():
    """Testa que o intervalo é fechado"""
    i = interval(date(2025, 1, 6), date(2025, 1, 17))
    assert contains(i, date(2025, 1, 6))
    assert contains(i, date(2025, 1, 17))
    assert not contains(i, date(2025, 1, 18))


def test_group_sprints_by_quarter():
    """Testa o agrupamento cronológico por quarter"""
    sprints = [
        Sprint(id="c", name="C", start_date=date(2026, 1, 5), end_date=date(2026, 1, 16), planned_velocity=10),
        Sprint(id="a", name="A", start_date=date(2025, 3, 24), end_date=date(2025, 4, 4), planned_velocity=10),
        Sprint(id="b", name="B", start_date=date(2025, 4, 7), end_date=date(2025, 4, 18), planned_velocity=10),
    ]

    groups = group_sprints_by_quarter(sprints)

    assert [label for label, _ in groups] == ["Q1 2025", "Q2 2025", "Q1 2026"]
    assert [s.id for s in groups[0][1]] == ["a"]


def test_quarter_label_and_format():
    """Testa os rótulos de quarter e de período"""
    assert quarter_label(date(2025, 11, 3)) == "Q4 2025"
    assert format_date_range(date(2025, 1, 6), date(2025, 1, 17)) == "Jan 06 - Jan 17, 2025"
