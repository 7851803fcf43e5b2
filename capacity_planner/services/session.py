import threading
from datetime import date
from typing import List, Optional, Sequence, Tuple
from loguru import logger

from ..models.entities import PlanResult, PublicHoliday, Sprint, TeamMember, WorkItem
from .dependencies import partition_blocked
from .scheduler import (
    SprintScheduler,
    assign_work_item,
    clear_all_assignments,
    clear_assignments_from,
    unassign_work_item,
)


class PlanningSession:
    """
    Sessão de planejamento de um time

    Todas as operações de planejamento da sessão são serializadas por um lock, pois a
    contabilidade de capacidade restante não suporta alterações concorrentes. Cada
    operação devolve uma proposta; o estado da sessão só muda em ``commit``.
    """

    def __init__(
        self,
        work_items: Sequence[WorkItem],
        sprints: Sequence[Sprint],
        team_members: Sequence[TeamMember],
        public_holidays: Sequence[PublicHoliday],
        planning_date: Optional[date] = None,
    ):
        self.work_items: List[WorkItem] = list(work_items)
        self.sprints: List[Sprint] = list(sprints)
        self.team_members: List[TeamMember] = list(team_members)
        self.public_holidays: List[PublicHoliday] = list(public_holidays)
        self.planning_date = planning_date
        self._lock = threading.Lock()

    def auto_assign(self) -> PlanResult:
        """Executa uma rodada completa de planejamento sobre o estado atual"""
        with self._lock:
            scheduler = SprintScheduler(
                self.work_items,
                self.sprints,
                self.team_members,
                self.public_holidays,
                planning_date=self.planning_date,
            )
            return scheduler.schedule()

    def assign(self, work_item_id: str, sprint_id: str) -> Tuple[List[WorkItem], List[Sprint]]:
        with self._lock:
            return assign_work_item(
                work_item_id,
                sprint_id,
                self.work_items,
                self.sprints,
                self.team_members,
                self.public_holidays,
            )

    def unassign(self, work_item_id: str) -> Tuple[List[WorkItem], List[Sprint]]:
        with self._lock:
            return unassign_work_item(work_item_id, self.work_items, self.sprints)

    def clear_all(self) -> Tuple[List[WorkItem], List[Sprint]]:
        with self._lock:
            return clear_all_assignments(self.work_items, self.sprints)

    def clear_from(self, sprint_id: str) -> Tuple[List[WorkItem], List[Sprint]]:
        with self._lock:
            return clear_assignments_from(sprint_id, self.work_items, self.sprints)

    def blocked_and_ready(self) -> Tuple[List[WorkItem], List[WorkItem]]:
        """Particiona os itens não atribuídos em bloqueados e prontos"""
        with self._lock:
            unassigned = [
                w for w in self.work_items
                if not w.is_assigned and not w.is_completed and not w.is_epic
            ]
            return partition_blocked(unassigned, self.work_items)

    def commit(self, work_items: Sequence[WorkItem], sprints: Sequence[Sprint]) -> None:
        """
        Adota uma proposta como novo estado da sessão

        Deve ser chamado apenas depois que a proposta foi persistida com sucesso.
        """
        with self._lock:
            self.work_items = list(work_items)
            self.sprints = list(sprints)
            logger.info(f"Sessão atualizada: {len(self.work_items)} itens, {len(self.sprints)} sprints")
