from typing import List


class AssignmentError(RuntimeError):
    """Falha em uma atribuição manual de item a sprint"""


class WorkItemNotFoundError(AssignmentError):
    def __init__(self, work_item_id: str) -> None:
        super().__init__(f"Item de trabalho {work_item_id} não encontrado")
        self.work_item_id = work_item_id


class SprintNotFoundError(AssignmentError):
    def __init__(self, sprint_id: str) -> None:
        super().__init__(f"Sprint {sprint_id} não encontrada")
        self.sprint_id = sprint_id


class CapacityShortfallError(AssignmentError):
    """Capacidade insuficiente em uma ou mais raias da sprint"""

    def __init__(self, work_item_id: str, sprint_id: str, skills: List[str], available: dict, required: float) -> None:
        super().__init__(
            f"Capacidade insuficiente de {' e '.join(skills)} na sprint {sprint_id} "
            f"para o item {work_item_id}: necessário {required:.1f} pts, "
            f"disponível {', '.join(f'{k} {v:.1f}' for k, v in available.items())}"
        )
        self.work_item_id = work_item_id
        self.sprint_id = sprint_id
        self.skills = skills
        self.available = available
        self.required = required


class DependencyShortfallError(AssignmentError):
    """Dependências não terminam antes do início da sprint"""

    def __init__(self, work_item_id: str, sprint_id: str, dependencies: List[str]) -> None:
        super().__init__(
            f"Dependências do item {work_item_id} não satisfeitas para a sprint {sprint_id}. "
            f"Bloqueado por: {', '.join(dependencies)}"
        )
        self.work_item_id = work_item_id
        self.sprint_id = sprint_id
        self.dependencies = dependencies
