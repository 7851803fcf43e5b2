from enum import Enum
from statistics import mean, pvariance
from typing import List, Optional, Sequence
from pydantic import BaseModel

from ..models.entities import Sprint, TeamMember, Skill


class VelocityTrend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Fator conservador aplicado à previsão conforme a confiança
CONSERVATIVE_FACTOR = {
    Confidence.HIGH: 0.95,
    Confidence.MEDIUM: 0.90,
    Confidence.LOW: 0.85,
}

BLEND_FACTOR = {
    Confidence.HIGH: 0.7,
    Confidence.MEDIUM: 0.5,
    Confidence.LOW: 0.3,
}


class VelocityAnalysis(BaseModel):
    """Análise do histórico de velocidade das sprints"""
    average_velocity: float = 0.0
    velocity_trend: VelocityTrend = VelocityTrend.STABLE
    confidence_level: Confidence = Confidence.LOW
    sprints_with_data: int = 0
    last_actual_velocity: Optional[float] = None
    predicted_velocity: float = 0.0
    velocity_variance: float = 0.0


class VelocityRecommendation(BaseModel):
    recommended_velocity: float
    adjustment_reason: str
    confidence: Confidence


def analyze_velocity_trends(sprints: Sequence[Sprint]) -> VelocityAnalysis:
    """
    Analisa a velocidade real das sprints encerradas

    Com 6 ou mais sprints compara as 3 mais recentes com as 3 anteriores para definir
    a tendência (variação acima de 15%). Com 3 a 5 usa a média entre o histórico e as
    2 mais recentes. A previsão é reduzida por um fator conservador conforme a confiança.

    Args:
        sprints: Sprints (apenas as com ``actual_velocity`` positiva são consideradas)

    Returns:
        VelocityAnalysis: Resultado da análise
    """
    history = sorted(
        (s for s in sprints if s.actual_velocity is not None and s.actual_velocity > 0),
        key=lambda s: s.end_date,
    )
    if not history:
        return VelocityAnalysis()

    velocities = [s.actual_velocity for s in history]
    average = mean(velocities)
    variance = pvariance(velocities)

    trend = VelocityTrend.STABLE
    if len(history) >= 6:
        recent_avg = mean(velocities[-3:])
        previous_avg = mean(velocities[-6:-3])
        change = (recent_avg - previous_avg) / previous_avg
        if change > 0.15:
            trend = VelocityTrend.IMPROVING
            predicted = recent_avg * 1.05
        elif change < -0.15:
            trend = VelocityTrend.DECLINING
            predicted = recent_avg * 0.95
        else:
            predicted = recent_avg
        confidence = Confidence.HIGH
    elif len(history) >= 3:
        predicted = (average + mean(velocities[-2:])) / 2
        confidence = Confidence.MEDIUM
    else:
        predicted = average
        confidence = Confidence.LOW

    predicted *= CONSERVATIVE_FACTOR[confidence]

    return VelocityAnalysis(
        average_velocity=round(average, 1),
        velocity_trend=trend,
        confidence_level=confidence,
        sprints_with_data=len(history),
        last_actual_velocity=velocities[-1],
        predicted_velocity=round(predicted, 1),
        velocity_variance=round(variance, 1),
    )


def recommend_sprint_velocity(analysis: VelocityAnalysis, planned_velocity: float) -> VelocityRecommendation:
    """
    Sugere a velocidade de uma sprint combinando o planejado com o histórico

    Sem histórico mantém o planejado. Até 20% de diferença adota o histórico; acima
    disso mistura os dois com peso proporcional à confiança.
    """
    if analysis.sprints_with_data == 0:
        return VelocityRecommendation(
            recommended_velocity=planned_velocity,
            adjustment_reason="Sem histórico de velocidade, usando a velocidade planejada",
            confidence=Confidence.LOW,
        )

    historical = analysis.predicted_velocity
    if historical > 0 and abs(planned_velocity - historical) / historical <= 0.20:
        return VelocityRecommendation(
            recommended_velocity=historical,
            adjustment_reason=f"Ajustada para a média histórica ({analysis.sprints_with_data} sprints)",
            confidence=analysis.confidence_level,
        )

    blend = BLEND_FACTOR[analysis.confidence_level]
    blended = historical * blend + planned_velocity * (1 - blend)
    return VelocityRecommendation(
        recommended_velocity=round(blended, 1),
        adjustment_reason=f"Combinação da planejada ({planned_velocity:g}) com a histórica ({historical:g})",
        confidence=analysis.confidence_level,
    )


def velocity_recommendations(analysis: VelocityAnalysis, team_members: Sequence[TeamMember]) -> List[str]:
    """Recomendações textuais a partir da análise de velocidade e da composição do time"""
    recommendations = []

    if analysis.sprints_with_data == 0:
        recommendations.append("Sem histórico de velocidade. Registre a velocidade real das sprints encerradas.")
    else:
        if analysis.confidence_level == Confidence.LOW:
            recommendations.append(
                f"Apenas {analysis.sprints_with_data} sprint(s) com velocidade real. "
                "Mais histórico melhora as previsões."
            )
        if analysis.velocity_trend == VelocityTrend.IMPROVING:
            recommendations.append("Velocidade em alta. Considere aumentar levemente a capacidade das sprints.")
        elif analysis.velocity_trend == VelocityTrend.DECLINING:
            recommendations.append("Velocidade em queda. Revise o planejamento e possíveis impedimentos.")
        if analysis.velocity_variance > analysis.average_velocity * 0.3:
            recommendations.append("Alta variância de velocidade. Busque estimativas e planejamento mais consistentes.")

    active = [m for m in team_members if m.capacity > 0]
    if not any(m.has_skill(Skill.FRONTEND) for m in active) or not any(m.has_skill(Skill.BACKEND) for m in active):
        recommendations.append("Time sem equilíbrio entre frontend e backend.")

    return recommendations
