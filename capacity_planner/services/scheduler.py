from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple
from loguru import logger

from ..exceptions import (
    AssignmentError,
    CapacityShortfallError,
    DependencyShortfallError,
    SprintNotFoundError,
    WorkItemNotFoundError,
)
from ..models.entities import (
    PlanResult,
    PublicHoliday,
    Sprint,
    TeamMember,
    WorkItem,
)
from .capacity import TOTAL_LANE, available_capacity, capacity_shortfall
from .dependencies import can_start_in_sprint, dependencies_satisfied, unmet_dependencies


class SprintScheduler:
    """Serviço responsável pela distribuição automática de itens nas sprints"""

    def __init__(
        self,
        work_items: Sequence[WorkItem],
        sprints: Sequence[Sprint],
        team_members: Sequence[TeamMember],
        public_holidays: Sequence[PublicHoliday],
        planning_date: Optional[date] = None,
    ):
        """
        Inicializa o agendador

        As coleções recebidas não são alteradas: o agendador trabalha sobre cópias e
        devolve novas coleções no resultado.

        Args:
            work_items: Coleção completa de itens de trabalho
            sprints: Coleção de sprints
            team_members: Membros do time
            public_holidays: Feriados
            planning_date: Sprints que terminam antes desta data não recebem itens
        """
        self.work_items = [w.model_copy(deep=True) for w in work_items]
        self.sprints = [s.model_copy(deep=True) for s in sprints]
        self.team_members = list(team_members)
        self.public_holidays = list(public_holidays)
        self.planning_date = planning_date

        self._items_by_id = {w.id: w for w in self.work_items}
        self._sprints_by_id = {s.id: s for s in self.sprints}

        # Capacidade restante por sprint e raia durante uma rodada
        self.sprint_capacity: Dict[str, dict] = {}
        self.result = PlanResult()

    def _select_candidates(self) -> List[WorkItem]:
        """Seleciona os itens prontos, não concluídos e que não são épicos"""
        candidates = []
        for item in self.work_items:
            if item.is_epic or item.is_completed:
                continue
            if not dependencies_satisfied(item, self.work_items):
                self.result.blocked.append(item.id)
                logger.info(f"Item {item.id} bloqueado por dependências: {item.dependencies}")
                continue
            candidates.append(item)
        return candidates

    def _reset_assignments(self, candidates: List[WorkItem]) -> None:
        """Remove atribuições anteriores dos itens que serão replanejados"""
        candidate_ids = {item.id for item in candidates}
        for item in candidates:
            item.assigned_sprints = []
        for sprint in self.sprints:
            sprint.work_items = [w for w in sprint.work_items if w not in candidate_ids]

    def _initialize_sprint_capacity(self) -> None:
        """Inicializa a capacidade restante de cada sprint"""
        self.sprint_capacity = {}
        for sprint in self.sprints:
            self.sprint_capacity[sprint.id] = available_capacity(
                sprint, self.work_items, self.team_members, self.public_holidays
            )
            logger.info(
                f"Capacidade inicial da sprint {sprint.name}: "
                + ", ".join(f"{lane}={value:.1f}" for lane, value in self.sprint_capacity[sprint.id].items())
            )

    def _update_sprint_capacity(self, sprint_id: str, item: WorkItem) -> None:
        """
        Deduz a estimativa do item da capacidade restante da sprint

        Args:
            sprint_id: Sprint escolhida
            item: Item alocado
        """
        ledger = self.sprint_capacity[sprint_id]
        for skill in set(item.required_skills):
            ledger[skill.value] -= item.estimate_story_points
        ledger[TOTAL_LANE] -= item.estimate_story_points

    def _is_open(self, sprint: Sprint) -> bool:
        return self.planning_date is None or sprint.end_date >= self.planning_date

    def _get_feasible_sprints(self, item: WorkItem) -> Tuple[List[Sprint], str]:
        """
        Lista as sprints onde o item pode ser alocado agora

        Returns:
            Tuple[List[Sprint], str]: Sprints viáveis e, se não houver nenhuma, o motivo
        """
        before_deadline = [
            s for s in self.sprints
            if s.end_date <= item.required_completion_date and self._is_open(s)
        ]
        if not before_deadline:
            return [], "nenhuma sprint termina até o prazo"

        dependency_ok = [
            s for s in before_deadline
            if can_start_in_sprint(item, s, self.work_items, self.sprints)
        ]
        if not dependency_ok:
            return [], "dependências não terminam antes de nenhuma sprint até o prazo"

        feasible = [
            s for s in dependency_ok
            if not capacity_shortfall(item, self.sprint_capacity[s.id])
        ]
        if not feasible:
            return [], "falta de capacidade nas sprints até o prazo"

        return feasible, ""

    def _schedule_work_item(self, item: WorkItem) -> bool:
        """
        Aloca um item na sprint viável mais tardia antes do prazo

        Args:
            item: Item a ser alocado

        Returns:
            bool: True se o item foi alocado
        """
        feasible, reason = self._get_feasible_sprints(item)
        if not feasible:
            logger.warning(f"Item {item.id} não alocado: {reason}")
            self.result.add_unplaced(item, reason)
            return False

        sprint = max(feasible, key=lambda s: (s.end_date, s.start_date))
        item.assigned_sprints = [sprint.id]
        if item.id not in sprint.work_items:
            sprint.work_items.append(item.id)
        self._update_sprint_capacity(sprint.id, item)

        logger.info(
            f"Item {item.id} ({item.estimate_story_points:g} pts) alocado na sprint {sprint.name}"
        )
        return True

    def schedule(self) -> PlanResult:
        """
        Executa uma rodada completa de planejamento

        Os itens prontos têm suas atribuições zeradas e são realocados por ordem de
        prazo (mais cedo primeiro), cada um na sprint viável mais próxima do prazo.

        Returns:
            PlanResult: Novas coleções de itens e sprints, itens não alocados e bloqueados
        """
        logger.info(f"Iniciando planejamento de {len(self.work_items)} itens em {len(self.sprints)} sprints")
        self.result = PlanResult()

        candidates = self._select_candidates()
        self._reset_assignments(candidates)
        self._initialize_sprint_capacity()

        candidates.sort(key=lambda w: w.required_completion_date)
        placed = sum(1 for item in candidates if self._schedule_work_item(item))

        self.result.work_items = self.work_items
        self.result.sprints = self.sprints
        self.result.possible_end_date = _possible_end_date(self.sprints, self.work_items)

        logger.info(
            f"Planejamento concluído: {placed} alocados, {len(self.result.unplaced)} não alocados, "
            f"{len(self.result.blocked)} bloqueados"
        )
        return self.result


def _possible_end_date(sprints: Sequence[Sprint], work_items: Sequence[WorkItem]) -> Optional[date]:
    """Data de término da última sprint que contém algum item"""
    used = {s for item in work_items if not item.is_epic for s in item.assigned_sprints}
    ends = [s.end_date for s in sprints if s.id in used]
    return max(ends) if ends else None


def _copy_collections(
    work_items: Sequence[WorkItem], sprints: Sequence[Sprint]
) -> Tuple[List[WorkItem], List[Sprint]]:
    return [w.model_copy(deep=True) for w in work_items], [s.model_copy(deep=True) for s in sprints]


def _detach(item: WorkItem, sprints: Sequence[Sprint], sprint_ids: Optional[set] = None) -> None:
    """Remove o item das sprints indicadas (todas, se None)"""
    targets = set(item.assigned_sprints) if sprint_ids is None else sprint_ids
    item.assigned_sprints = [s for s in item.assigned_sprints if s not in targets]
    for sprint in sprints:
        if sprint.id in targets:
            sprint.work_items = [w for w in sprint.work_items if w != item.id]


def assign_work_item(
    work_item_id: str,
    sprint_id: str,
    work_items: Sequence[WorkItem],
    sprints: Sequence[Sprint],
    team_members: Sequence[TeamMember],
    public_holidays: Sequence[PublicHoliday],
) -> Tuple[List[WorkItem], List[Sprint]]:
    """
    Atribui manualmente um item a uma sprint

    Valida as dependências e a capacidade de cada skill contra o estado atual. A
    operação é tudo-ou-nada: em caso de falha nenhuma coleção é alterada.

    Args:
        work_item_id: Id do item
        sprint_id: Id da sprint de destino
        work_items: Coleção completa de itens
        sprints: Coleção de sprints
        team_members: Membros do time
        public_holidays: Feriados

    Returns:
        Tuple[List[WorkItem], List[Sprint]]: Novas coleções com a atribuição registrada

    Raises:
        WorkItemNotFoundError: Item inexistente
        SprintNotFoundError: Sprint inexistente
        DependencyShortfallError: Dependências não terminam antes da sprint
        CapacityShortfallError: Falta capacidade em alguma skill do item
        AssignmentError: Item é um épico ou já está na sprint
    """
    item = next((w for w in work_items if w.id == work_item_id), None)
    if item is None:
        raise WorkItemNotFoundError(work_item_id)
    sprint = next((s for s in sprints if s.id == sprint_id), None)
    if sprint is None:
        raise SprintNotFoundError(sprint_id)

    if item.is_epic:
        raise AssignmentError(f"Épico {item.id} não pode ser atribuído a uma sprint")
    if sprint_id in item.assigned_sprints:
        raise AssignmentError(f"Item {item.id} já está atribuído à sprint {sprint.name}")

    unmet = unmet_dependencies(item, sprint, work_items, sprints)
    if unmet:
        logger.warning(f"Atribuição de {item.id} em {sprint.name} rejeitada por dependências")
        raise DependencyShortfallError(item.id, sprint.id, [dep.title for dep in unmet])

    available = available_capacity(sprint, work_items, team_members, public_holidays, exclude=[item.id])
    short_lanes = capacity_shortfall(item, available)
    if short_lanes:
        logger.warning(f"Atribuição de {item.id} em {sprint.name} rejeitada por capacidade: {short_lanes}")
        raise CapacityShortfallError(item.id, sprint.id, short_lanes, available, item.estimate_story_points)

    new_items, new_sprints = _copy_collections(work_items, sprints)
    target_item = next(w for w in new_items if w.id == work_item_id)
    target_sprint = next(s for s in new_sprints if s.id == sprint_id)

    _detach(target_item, new_sprints)
    target_item.assigned_sprints = [sprint_id]
    target_sprint.work_items.append(work_item_id)

    logger.info(f"Item {work_item_id} atribuído manualmente à sprint {sprint.name}")
    return new_items, new_sprints


def unassign_work_item(
    work_item_id: str,
    work_items: Sequence[WorkItem],
    sprints: Sequence[Sprint],
) -> Tuple[List[WorkItem], List[Sprint]]:
    """Remove o item de todas as sprints a que está atribuído"""
    if not any(w.id == work_item_id for w in work_items):
        raise WorkItemNotFoundError(work_item_id)

    new_items, new_sprints = _copy_collections(work_items, sprints)
    item = next(w for w in new_items if w.id == work_item_id)
    # Também limpa referências na sprint que não estejam espelhadas no item
    _detach(item, new_sprints, {s.id for s in new_sprints})
    logger.info(f"Item {work_item_id} removido das sprints")
    return new_items, new_sprints


def clear_all_assignments(
    work_items: Sequence[WorkItem],
    sprints: Sequence[Sprint],
) -> Tuple[List[WorkItem], List[Sprint]]:
    """Zera todas as atribuições de itens e sprints"""
    new_items, new_sprints = _copy_collections(work_items, sprints)
    for item in new_items:
        item.assigned_sprints = []
    for sprint in new_sprints:
        sprint.work_items = []
    logger.info("Todas as atribuições foram removidas")
    return new_items, new_sprints


def clear_assignments_from(
    sprint_id: str,
    work_items: Sequence[WorkItem],
    sprints: Sequence[Sprint],
) -> Tuple[List[WorkItem], List[Sprint]]:
    """
    Remove as atribuições da sprint indicada e de todas as que começam depois dela

    Raises:
        SprintNotFoundError: Sprint inexistente
    """
    start = next((s for s in sprints if s.id == sprint_id), None)
    if start is None:
        raise SprintNotFoundError(sprint_id)

    new_items, new_sprints = _copy_collections(work_items, sprints)
    cleared = {s.id for s in new_sprints if s.start_date >= start.start_date}
    for item in new_items:
        _detach(item, new_sprints, cleared)
    for sprint in new_sprints:
        if sprint.id in cleared:
            sprint.work_items = []

    logger.info(f"Atribuições removidas de {len(cleared)} sprints a partir de {start.name}")
    return new_items, new_sprints
