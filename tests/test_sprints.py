from datetime import date, timedelta
from capacity_planner.models.config import SprintConfig
from capacity_planner.services.sprints import generate_sprints_for_year


def test_generate_sprints_sequence():
    """Testa a geração de sprints consecutivas"""
    config = SprintConfig(first_sprint_start_date="2025-01-06", sprint_duration_days=14, default_velocity=25)

    sprints = generate_sprints_for_year(config, 2025)

    assert sprints[0].id == "sprint-2025-1"
    assert sprints[0].name == "Q1 2025 Sprint 1"
    assert sprints[0].start_date == date(2025, 1, 6)
    assert sprints[0].end_date == date(2025, 1, 19)
    assert sprints[0].planned_velocity == 25
    assert sprints[0].work_items == []
    for previous, current in zip(sprints, sprints[1:]):
        assert current.start_date == previous.end_date + timedelta(days=1)
    assert sprints[-1].start_date <= date(2025, 12, 31)
    assert sprints[-1].end_date + timedelta(days=1) > date(2025, 12, 31)
    assert len(sprints) == 26


def test_generate_sprints_quarter_numbering():
    """Testa a numeração por quarter"""
    config = SprintConfig(first_sprint_start_date="2025-01-06", sprint_duration_days=14)

    sprints = generate_sprints_for_year(config, 2025)
    q2 = [s for s in sprints if s.name.startswith("Q2 2025")]

    # Sprint 7 começa em 31/03 e ainda pertence ao Q1
    assert sprints[6].name == "Q1 2025 Sprint 7"
    assert q2[0].name == "Q2 2025 Sprint 1"
    assert q2[0].start_date == date(2025, 4, 14)


def test_generate_sprints_starting_number():
    """Testa o número inicial da sprint no primeiro quarter"""
    config = SprintConfig(
        first_sprint_start_date="2025-02-17", sprint_duration_days=14, starting_sprint_number=4
    )

    sprints = generate_sprints_for_year(config, 2025)

    assert sprints[0].name == "Q1 2025 Sprint 4"
    assert sprints[1].name == "Q1 2025 Sprint 5"
    q2 = [s for s in sprints if s.name.startswith("Q2 2025")]
    assert q2[0].name == "Q2 2025 Sprint 1"


def test_generate_sprints_is_deterministic():
    """Testa que a geração é uma função pura"""
    config = SprintConfig(first_sprint_start_date="2025-01-06", sprint_duration_days=7)
    assert generate_sprints_for_year(config, 2025) == generate_sprints_for_year(config, 2025)


def test_generate_sprints_start_after_year():
    """Testa que nenhuma sprint é gerada se a primeira começa depois do ano"""
    config = SprintConfig(first_sprint_start_date="2026-01-05")
    assert generate_sprints_for_year(config, 2025) == []
