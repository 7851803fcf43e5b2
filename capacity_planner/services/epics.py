from typing import List, Sequence
from pydantic import BaseModel, Field

from ..models.entities import WorkItem


class EpicSummary(BaseModel):
    """Agrupamento de apresentação de um épico sobre a coleção plana"""
    epic_id: str
    title: str
    children: List[str] = Field(default_factory=list)
    total_story_points: float = 0.0
    completed_story_points: float = 0.0

    @property
    def completion_percentage(self) -> float:
        if self.total_story_points == 0:
            return 0.0
        return self.completed_story_points / self.total_story_points * 100


def summarize_epics(work_items: Sequence[WorkItem]) -> List[EpicSummary]:
    """
    Agrupa os itens filhos sob seus épicos

    Args:
        work_items: Coleção plana de itens

    Returns:
        List[EpicSummary]: Um resumo por épico, na ordem da coleção
    """
    summaries = {
        item.id: EpicSummary(epic_id=item.id, title=item.title)
        for item in work_items if item.is_epic
    }
    for item in work_items:
        summary = summaries.get(item.epic_id) if item.epic_id else None
        if summary is None:
            continue
        summary.children.append(item.id)
        summary.total_story_points += item.estimate_story_points
        if item.is_completed:
            summary.completed_story_points += item.estimate_story_points
    return list(summaries.values())
