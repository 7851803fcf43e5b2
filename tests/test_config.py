import pytest
from datetime import date
from pydantic import ValidationError
from capacity_planner.models.config import SetupConfig, SprintConfig


def test_sprint_config_creation():
    """Testa a criação de uma configuração de sprints"""
    config = SprintConfig(
        first_sprint_start_date="2025-01-06",
        sprint_duration_days=14,
        default_velocity=30,
        starting_sprint_number=3,
    )

    assert config.first_sprint_start_date == date(2025, 1, 6)
    assert config.sprint_duration_days == 14
    assert config.default_velocity == 30
    assert config.starting_sprint_number == 3


def test_sprint_config_invalid_date():
    """Testa a validação de data inválida"""
    with pytest.raises(ValidationError, match="Formato esperado: YYYY-MM-DD"):
        SprintConfig(first_sprint_start_date="06/01/2025")


def test_sprint_config_invalid_duration():
    """Testa a validação de duração inválida"""
    with pytest.raises(ValidationError):
        SprintConfig(first_sprint_start_date="2025-01-06", sprint_duration_days=0)


def test_setup_config_creation():
    """Testa a criação da configuração principal"""
    setup = SetupConfig(
        team_file="team.json",
        holidays_file="holidays.json",
        work_items_file="work_items.json",
        sprint_config={"first_sprint_start_date": "2025-01-06"},
        year=2025,
        planning_date="2025-01-20",
        target_delivery_date="2025-06-30",
    )

    assert setup.sprints_file is None
    assert setup.planning_date == date(2025, 1, 20)
    assert setup.target_delivery_date == date(2025, 6, 30)
    assert setup.output_dir == "output"
    assert setup.sprint_config.sprint_duration_days == 14
    assert not setup.detect_skills
