from typing import Iterable, List, Optional, Sequence
from loguru import logger

from ..models.entities import (
    PublicHoliday,
    Skill,
    SkillCapacities,
    Sprint,
    TeamMember,
    WorkItem,
)
from .dates import contains, overlap, working_days

# Tolerância para comparações de pontos em ponto flutuante
EPSILON = 1e-9

TOTAL_LANE = "total"


def _public_holiday_impact(sprint: Sprint, public_holidays: Iterable[PublicHoliday], sprint_working_days: int) -> float:
    """
    Soma o impacto fracionário dos feriados dentro da sprint

    Todo feriado dentro do intervalo da sprint, inclusive em final de semana,
    representa um dia útil perdido, proporcional ao total de dias úteis da sprint.
    Os impactos se somam (não se compõem).
    """
    interval = sprint.interval
    holidays_in_sprint = [h for h in public_holidays if contains(interval, h.date)]
    return len(holidays_in_sprint) / sprint_working_days


def _personal_holiday_loss(sprint: Sprint, member: TeamMember) -> int:
    """Dias úteis da sprint em que o membro está ausente"""
    interval = sprint.interval
    lost = 0
    for holiday in member.personal_holidays:
        intersection = overlap(interval, holiday.interval)
        if intersection is not None:
            lost += working_days(intersection)
    return lost


def sprint_capacity(
    sprint: Sprint,
    team_members: Sequence[TeamMember],
    public_holidays: Sequence[PublicHoliday],
) -> float:
    """
    Calcula a capacidade agregada da sprint (apenas para exibição)

    Parte da velocidade planejada, reduz proporcionalmente pelos feriados e depois
    pelas ausências individuais ponderadas pelo percentual de capacidade de cada
    membro.

    Args:
        sprint: Sprint a ser calculada
        team_members: Membros do time
        public_holidays: Feriados

    Returns:
        float: Pontos disponíveis (nunca negativo)
    """
    sprint_working_days = working_days(sprint.interval)
    if sprint_working_days == 0:
        return 0.0

    capacity = sprint.planned_velocity
    capacity *= max(0.0, 1 - _public_holiday_impact(sprint, public_holidays, sprint_working_days))

    weighted_loss = sum(
        _personal_holiday_loss(sprint, member) * (member.capacity / 100)
        for member in team_members
    )
    capacity *= max(0.0, 1 - weighted_loss / sprint_working_days)

    return max(0.0, capacity)


def skill_capacity(
    sprint: Sprint,
    team_members: Sequence[TeamMember],
    public_holidays: Sequence[PublicHoliday],
    skill: Skill,
) -> float:
    """
    Calcula a capacidade de uma raia de skill na sprint

    A velocidade planejada é primeiro escalada pela razão entre a capacidade somada
    dos membros com a skill e a capacidade somada do time. As ausências consideram
    apenas os membros da skill, com peso normalizado pela capacidade do subgrupo.

    Args:
        sprint: Sprint a ser calculada
        team_members: Membros do time
        public_holidays: Feriados
        skill: Skill da raia

    Returns:
        float: Pontos disponíveis na raia (nunca negativo)
    """
    skill_members = [m for m in team_members if m.has_skill(skill)]
    team_total = sum(m.capacity for m in team_members)
    skill_total = sum(m.capacity for m in skill_members)

    if team_total == 0 or skill_total == 0:
        return 0.0

    sprint_working_days = working_days(sprint.interval)
    if sprint_working_days == 0:
        return 0.0

    capacity = sprint.planned_velocity * (skill_total / team_total)
    capacity *= max(0.0, 1 - _public_holiday_impact(sprint, public_holidays, sprint_working_days))

    weighted_loss = sum(
        _personal_holiday_loss(sprint, member) * (member.capacity / skill_total)
        for member in skill_members
    )
    capacity *= max(0.0, 1 - weighted_loss / sprint_working_days)

    return max(0.0, capacity)


def sprint_skill_capacities(
    sprint: Sprint,
    team_members: Sequence[TeamMember],
    public_holidays: Sequence[PublicHoliday],
) -> SkillCapacities:
    """Capacidades de frontend e backend da sprint (total = frontend + backend)"""
    capacities = SkillCapacities(
        frontend=skill_capacity(sprint, team_members, public_holidays, Skill.FRONTEND),
        backend=skill_capacity(sprint, team_members, public_holidays, Skill.BACKEND),
    )
    logger.debug(
        f"Capacidade da sprint {sprint.name}: frontend={capacities.frontend:.1f}, "
        f"backend={capacities.backend:.1f}, total={capacities.total:.1f}"
    )
    return capacities


def assigned_points(
    sprint: Sprint,
    work_items: Iterable[WorkItem],
    exclude: Optional[Iterable[str]] = None,
) -> dict:
    """
    Soma os pontos já atribuídos a uma sprint por raia

    Args:
        sprint: Sprint
        work_items: Coleção de itens
        exclude: Ids de itens a ignorar

    Returns:
        dict: Pontos por raia ("frontend", "backend" e "total")
    """
    excluded = set(exclude or [])
    used = {Skill.FRONTEND.value: 0.0, Skill.BACKEND.value: 0.0, TOTAL_LANE: 0.0}
    for item in work_items:
        if item.id in excluded or item.is_epic or sprint.id not in item.assigned_sprints:
            continue
        used[TOTAL_LANE] += item.estimate_story_points
        for skill in set(item.required_skills):
            used[skill.value] += item.estimate_story_points
    return used


def available_capacity(
    sprint: Sprint,
    work_items: Iterable[WorkItem],
    team_members: Sequence[TeamMember],
    public_holidays: Sequence[PublicHoliday],
    exclude: Optional[Iterable[str]] = None,
) -> dict:
    """Capacidade restante por raia descontando os itens já atribuídos à sprint"""
    capacities = sprint_skill_capacities(sprint, team_members, public_holidays)
    used = assigned_points(sprint, work_items, exclude)
    return {
        Skill.FRONTEND.value: capacities.frontend - used[Skill.FRONTEND.value],
        Skill.BACKEND.value: capacities.backend - used[Skill.BACKEND.value],
        TOTAL_LANE: capacities.total - used[TOTAL_LANE],
    }


def capacity_shortfall(work_item: WorkItem, available: dict) -> List[str]:
    """
    Verifica em quais raias o item não cabe

    Um item com várias skills precisa caber simultaneamente em todas elas. Itens sem
    skill declarada são verificados contra a raia total.

    Args:
        work_item: Item a ser verificado
        available: Capacidade restante por raia

    Returns:
        List[str]: Raias sem capacidade suficiente (vazia se o item cabe)
    """
    lanes = [skill.value for skill in dict.fromkeys(work_item.required_skills)] or [TOTAL_LANE]
    return [
        lane for lane in lanes
        if available.get(lane, 0.0) + EPSILON < work_item.estimate_story_points
    ]
