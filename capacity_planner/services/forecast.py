import math
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple
from loguru import logger
from pydantic import BaseModel

from ..models.entities import PublicHoliday, Skill, Sprint, TeamMember, WorkItem
from .capacity import EPSILON, sprint_skill_capacities
from .skills import detect_skills
from .velocity import Confidence


class DeliveryForecast(BaseModel):
    """Previsão de entrega do trabalho restante por raia de skill"""
    frontend_points: float = 0.0
    backend_points: float = 0.0
    frontend_capacity: float = 0.0
    backend_capacity: float = 0.0
    frontend_sprints_required: Optional[int] = 0
    backend_sprints_required: Optional[int] = 0
    sprints_required: Optional[int] = 0
    bottleneck_skill: Optional[Skill] = None
    estimated_delivery_date: Optional[date] = None
    target_date: Optional[date] = None
    can_meet_target: bool = True
    confidence_level: Confidence = Confidence.HIGH

    @property
    def total_story_points(self) -> float:
        return self.frontend_points + self.backend_points


def outstanding_points(work_items: Sequence[WorkItem]) -> Tuple[float, float]:
    """
    Soma os pontos restantes de frontend e backend

    Itens com as duas skills dividem a estimativa pela metade. Itens sem skill
    declarada usam a sugestão de ``detect_skills``.

    Returns:
        Tuple[float, float]: (pontos frontend, pontos backend)
    """
    frontend = backend = 0.0
    for item in work_items:
        if item.is_completed or item.is_epic:
            continue
        skills = set(item.required_skills) or set(detect_skills(item.title, item.description))
        if skills == {Skill.FRONTEND}:
            frontend += item.estimate_story_points
        elif skills == {Skill.BACKEND}:
            backend += item.estimate_story_points
        else:
            frontend += item.estimate_story_points / 2
            backend += item.estimate_story_points / 2
    return frontend, backend


def _sprints_for_lane(points: float, capacities: List[float]) -> Optional[int]:
    """
    Número de sprints até a raia esgotar seus pontos

    Depois da última sprint conhecida, extrapola com a capacidade da última sprint.
    Retorna None se a raia tem pontos mas nunca terá capacidade.
    """
    if points <= EPSILON:
        return 0
    remaining = points
    for index, capacity in enumerate(capacities, start=1):
        remaining -= capacity
        if remaining <= EPSILON:
            return index
    last = capacities[-1] if capacities else 0.0
    if last <= EPSILON:
        return None
    return len(capacities) + math.ceil(remaining / last - EPSILON)


def _bottleneck(frontend: Optional[int], backend: Optional[int]) -> Optional[Skill]:
    if frontend is None or backend is None:
        if frontend is None and backend is None:
            return None
        return Skill.FRONTEND if frontend is None else Skill.BACKEND
    if frontend > backend:
        return Skill.FRONTEND
    if backend > frontend:
        return Skill.BACKEND
    return None


def _confidence(sprints_required: Optional[int]) -> Confidence:
    if sprints_required is None or sprints_required > 6:
        return Confidence.LOW
    if sprints_required > 3:
        return Confidence.MEDIUM
    return Confidence.HIGH


def forecast_delivery(
    work_items: Sequence[WorkItem],
    sprints: Sequence[Sprint],
    team_members: Sequence[TeamMember],
    public_holidays: Sequence[PublicHoliday],
    reference_date: date,
    target_date: Optional[date] = None,
) -> DeliveryForecast:
    """
    Estima quando o trabalho restante será entregue

    Cada raia consome seus pontos restantes sprint a sprint, a partir da primeira
    sprint que termina em ``reference_date`` ou depois. A raia que precisa de mais
    sprints é o gargalo e define a data estimada de entrega.

    Args:
        work_items: Coleção completa de itens
        sprints: Sprints conhecidas
        team_members: Membros do time
        public_holidays: Feriados
        reference_date: Data a partir da qual a capacidade é considerada
        target_date: Data alvo de entrega, se houver

    Returns:
        DeliveryForecast: Previsão de entrega
    """
    frontend_points, backend_points = outstanding_points(work_items)

    open_sprints = sorted(
        (s for s in sprints if s.end_date >= reference_date),
        key=lambda s: (s.start_date, s.end_date),
    )
    capacities = [sprint_skill_capacities(s, team_members, public_holidays) for s in open_sprints]
    frontend_capacities = [c.frontend for c in capacities]
    backend_capacities = [c.backend for c in capacities]

    frontend_sprints = _sprints_for_lane(frontend_points, frontend_capacities)
    backend_sprints = _sprints_for_lane(backend_points, backend_capacities)
    if frontend_sprints is None or backend_sprints is None:
        sprints_required = None
    else:
        sprints_required = max(frontend_sprints, backend_sprints)

    delivery_date = None
    if sprints_required and open_sprints:
        if sprints_required <= len(open_sprints):
            delivery_date = open_sprints[sprints_required - 1].end_date
        else:
            # Cadência entre inícios de sprint; com uma única sprint, a sua duração
            last = open_sprints[-1]
            if len(open_sprints) >= 2:
                cadence = (last.start_date - open_sprints[-2].start_date).days
            else:
                cadence = (last.end_date - last.start_date).days + 1
            delivery_date = last.end_date + timedelta(days=(sprints_required - len(open_sprints)) * cadence)

    if sprints_required is None:
        can_meet_target = False
    elif target_date is None or delivery_date is None:
        can_meet_target = True
    else:
        can_meet_target = delivery_date <= target_date

    forecast = DeliveryForecast(
        frontend_points=frontend_points,
        backend_points=backend_points,
        frontend_capacity=frontend_capacities[0] if frontend_capacities else 0.0,
        backend_capacity=backend_capacities[0] if backend_capacities else 0.0,
        frontend_sprints_required=frontend_sprints,
        backend_sprints_required=backend_sprints,
        sprints_required=sprints_required,
        bottleneck_skill=_bottleneck(frontend_sprints, backend_sprints),
        estimated_delivery_date=delivery_date,
        target_date=target_date,
        can_meet_target=can_meet_target,
        confidence_level=_confidence(sprints_required),
    )
    if sprints_required is None:
        logger.warning("Trabalho restante sem capacidade em alguma raia, entrega não estimada")
    return forecast


def forecast_summary(forecast: DeliveryForecast) -> List[str]:
    """Linhas de texto com o resumo da previsão"""
    lines = [
        f"Pontos restantes: {forecast.total_story_points:g} "
        f"(frontend {forecast.frontend_points:g}, backend {forecast.backend_points:g})",
    ]
    if forecast.sprints_required is None:
        lines.append("Entrega não estimada: falta capacidade em alguma raia")
    else:
        delivery = forecast.estimated_delivery_date.strftime('%d/%m/%Y') if forecast.estimated_delivery_date else '-'
        lines.append(f"Sprints necessárias: {forecast.sprints_required} | Entrega estimada: {delivery}")
    if forecast.bottleneck_skill:
        lines.append(f"Gargalo: {forecast.bottleneck_skill.value}")
    if forecast.target_date:
        status = "atingível" if forecast.can_meet_target else "em risco"
        lines.append(f"Data alvo {forecast.target_date.strftime('%d/%m/%Y')}: {status}")
    lines.append(f"Confiança: {forecast.confidence_level.value}")
    return lines
