import pytest
from datetime import date
from capacity_planner.models.entities import (
    Sprint,
    TeamMember,
    WorkItem,
    Skill,
    WorkItemStatus,
)


@pytest.fixture
def sprints():
    """Fixture para três sprints consecutivas de duas semanas (10 dias úteis cada)"""
    return [
        Sprint(id="s1", name="Q1 2025 Sprint 1", start_date=date(2025, 1, 6), end_date=date(2025, 1, 17), planned_velocity=20),
        Sprint(id="s2", name="Q1 2025 Sprint 2", start_date=date(2025, 1, 20), end_date=date(2025, 1, 31), planned_velocity=20),
        Sprint(id="s3", name="Q1 2025 Sprint 3", start_date=date(2025, 2, 3), end_date=date(2025, 2, 14), planned_velocity=20),
    ]


@pytest.fixture
def team_members():
    """Fixture para um time com um membro frontend e um backend"""
    return [
        TeamMember(id="a", name="Ana", capacity=100, skills=[Skill.FRONTEND]),
        TeamMember(id="b", name="Bruno", capacity=100, skills=[Skill.BACKEND]),
    ]


@pytest.fixture
def make_item():
    """Fixture para criar itens de trabalho com valores padrão"""
    def _make_item(item_id, estimate=5, deadline=date(2025, 2, 14), skills=(Skill.FRONTEND,), **kwargs):
        return WorkItem(
            id=item_id,
            title=kwargs.pop("title", f"Item {item_id}"),
            estimate_story_points=estimate,
            required_completion_date=deadline,
            required_skills=list(skills),
            status=kwargs.pop("status", WorkItemStatus.NOT_STARTED),
            **kwargs
        )
    return _make_item
