from typing import Dict, List, Sequence, Tuple
from loguru import logger

from ..models.entities import Sprint, WorkItem


def _index(work_items: Sequence[WorkItem]) -> Dict[str, WorkItem]:
    return {item.id: item for item in work_items}


def dependencies_satisfied(work_item: WorkItem, all_work_items: Sequence[WorkItem]) -> bool:
    """
    Verifica se todas as dependências de um item estão concluídas

    Dependências que não existem na coleção são consideradas satisfeitas, para que
    referências antigas não travem o planejamento.

    Args:
        work_item: Item a ser verificado
        all_work_items: Coleção completa de itens

    Returns:
        bool: True se todas as dependências estão satisfeitas
    """
    if not work_item.dependencies:
        return True

    items_by_id = _index(all_work_items)
    for dep_id in work_item.dependencies:
        dep_item = items_by_id.get(dep_id)
        if dep_item is None:
            logger.debug(f"Dependência {dep_id} do item {work_item.id} não encontrada, considerada satisfeita")
            continue
        if not dep_item.is_completed:
            return False
    return True


def unmet_dependencies(
    work_item: WorkItem,
    sprint: Sprint,
    all_work_items: Sequence[WorkItem],
    all_sprints: Sequence[Sprint],
) -> List[WorkItem]:
    """
    Retorna as dependências que não terminam antes do início da sprint candidata

    Uma dependência não concluída só é aceita se estiver atribuída a alguma sprint e
    a última dessas sprints terminar estritamente antes do início da candidata.

    Args:
        work_item: Item a ser alocado
        sprint: Sprint candidata
        all_work_items: Coleção completa de itens
        all_sprints: Coleção completa de sprints

    Returns:
        List[WorkItem]: Dependências não atendidas (vazia se o item pode começar)
    """
    items_by_id = _index(all_work_items)
    sprints_by_id = {s.id: s for s in all_sprints}
    unmet = []

    for dep_id in work_item.dependencies:
        dep_item = items_by_id.get(dep_id)
        if dep_item is None or dep_item.is_completed:
            continue

        dep_sprints = [sprints_by_id[s] for s in dep_item.assigned_sprints if s in sprints_by_id]
        if not dep_sprints:
            # Sem sprint atribuída não há como saber quando a dependência termina
            unmet.append(dep_item)
            continue

        latest_end = max(s.end_date for s in dep_sprints)
        if not latest_end < sprint.start_date:
            unmet.append(dep_item)

    return unmet


def can_start_in_sprint(
    work_item: WorkItem,
    sprint: Sprint,
    all_work_items: Sequence[WorkItem],
    all_sprints: Sequence[Sprint],
) -> bool:
    """Verifica se as dependências do item terminam antes do início da sprint"""
    return not unmet_dependencies(work_item, sprint, all_work_items, all_sprints)


def partition_blocked(
    work_items: Sequence[WorkItem],
    all_work_items: Sequence[WorkItem],
) -> Tuple[List[WorkItem], List[WorkItem]]:
    """
    Separa os itens em bloqueados e prontos

    Bloqueado é um item não concluído com ao menos uma dependência não satisfeita;
    todo o resto é considerado pronto.

    Returns:
        Tuple[List[WorkItem], List[WorkItem]]: (bloqueados, prontos)
    """
    blocked, ready = [], []
    for item in work_items:
        if not item.is_completed and not dependencies_satisfied(item, all_work_items):
            blocked.append(item)
        else:
            ready.append(item)
    return blocked, ready


def get_blocked_work_items(work_items: Sequence[WorkItem], all_work_items: Sequence[WorkItem]) -> List[WorkItem]:
    return partition_blocked(work_items, all_work_items)[0]


def dependency_chain(work_item: WorkItem, all_work_items: Sequence[WorkItem]) -> List[WorkItem]:
    """
    Lista a cadeia transitiva de dependências de um item (uso em diagnóstico)

    As dependências mais profundas aparecem primeiro. Ciclos são tolerados: cada id
    é visitado uma única vez.

    Args:
        work_item: Item de origem
        all_work_items: Coleção completa de itens

    Returns:
        List[WorkItem]: Dependências transitivas, sem repetição
    """
    items_by_id = _index(all_work_items)
    chain: List[WorkItem] = []
    in_chain = set()
    visited = {work_item.id}
    # Pilha explícita: (item, índice da próxima dependência a visitar)
    stack = [(work_item, 0)]

    while stack:
        item, position = stack.pop()
        if position < len(item.dependencies):
            stack.append((item, position + 1))
            dep_item = items_by_id.get(item.dependencies[position])
            if dep_item is not None and dep_item.id not in visited:
                visited.add(dep_item.id)
                stack.append((dep_item, 0))
        elif item is not work_item and item.id not in in_chain:
            in_chain.add(item.id)
            chain.append(item)

    return chain
