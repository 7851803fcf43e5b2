from datetime import date
from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator


class Skill(str, Enum):
    """Skills (raias de capacidade) disponíveis"""
    FRONTEND = "frontend"
    BACKEND = "backend"


class WorkItemStatus(str, Enum):
    """Status possíveis para um item de trabalho"""
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class DateInterval(BaseModel):
    """Intervalo fechado de datas [start_date, end_date]"""
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def validate_order(self) -> "DateInterval":
        """Garante que o fim não é anterior ao início"""
        if self.end_date < self.start_date:
            raise ValueError(
                f"Intervalo inválido: fim {self.end_date} anterior ao início {self.start_date}"
            )
        return self


class PersonalHoliday(BaseModel):
    """Ausência individual de um membro do time"""
    id: Optional[str] = None
    member_id: Optional[str] = None
    start_date: date
    end_date: date
    description: str = ""

    @model_validator(mode="after")
    def validate_order(self) -> "PersonalHoliday":
        if self.end_date < self.start_date:
            raise ValueError(
                f"Ausência inválida: fim {self.end_date} anterior ao início {self.start_date}"
            )
        return self

    @property
    def interval(self) -> DateInterval:
        return DateInterval(start_date=self.start_date, end_date=self.end_date)


class TeamMember(BaseModel):
    """Modelo de um membro do time"""
    id: str
    name: str
    capacity: float = 100
    skills: List[Skill] = Field(default_factory=list)
    personal_holidays: List[PersonalHoliday] = Field(default_factory=list)

    @field_validator("capacity")
    @classmethod
    def clamp_capacity(cls, v: float) -> float:
        """Limita o percentual de capacidade ao intervalo [0, 100]"""
        return max(0.0, min(100.0, v))

    def has_skill(self, skill: Skill) -> bool:
        return skill in self.skills


class PublicHoliday(BaseModel):
    """Feriado que afeta o time inteiro"""
    id: Optional[str] = None
    name: str
    date: date
    impact_percentage: float = Field(default=100, ge=0, le=100)


class Sprint(BaseModel):
    """Representa uma sprint do planejamento"""
    id: str
    name: str
    start_date: date
    end_date: date
    planned_velocity: float = Field(ge=0)
    actual_velocity: Optional[float] = None
    work_items: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_order(self) -> "Sprint":
        if self.end_date < self.start_date:
            raise ValueError(
                f"Sprint {self.id} inválida: fim {self.end_date} anterior ao início {self.start_date}"
            )
        return self

    @property
    def interval(self) -> DateInterval:
        return DateInterval(start_date=self.start_date, end_date=self.end_date)


class WorkItem(BaseModel):
    """Modelo de um item de trabalho"""
    id: str
    jira_id: Optional[str] = None
    title: str
    description: str = ""
    estimate_story_points: float = Field(gt=0)
    required_completion_date: date
    required_skills: List[Skill] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    status: WorkItemStatus = WorkItemStatus.NOT_STARTED
    jira_status: Optional[str] = None
    assigned_sprints: List[str] = Field(default_factory=list)
    # Referência ao épico pai; épicos são agrupamentos sobre a coleção plana
    epic_id: Optional[str] = None
    is_epic: bool = False

    @property
    def is_completed(self) -> bool:
        return self.status == WorkItemStatus.COMPLETED

    @property
    def is_assigned(self) -> bool:
        return bool(self.assigned_sprints)


class SkillCapacities(BaseModel):
    """Capacidade de uma sprint por raia de skill"""
    frontend: float = 0.0
    backend: float = 0.0

    @property
    def total(self) -> float:
        """Por convenção de planejamento, total = frontend + backend"""
        return self.frontend + self.backend

    def for_skill(self, skill: Skill) -> float:
        return self.frontend if skill == Skill.FRONTEND else self.backend


class UnplacedWorkItem(BaseModel):
    """Item que não pôde ser alocado em nenhuma sprint"""
    work_item_id: str
    title: str
    reason: str


class PlanResult(BaseModel):
    """Resultado de uma rodada de planejamento (proposta até ser persistida)"""
    work_items: List[WorkItem] = Field(default_factory=list)
    sprints: List[Sprint] = Field(default_factory=list)
    unplaced: List[UnplacedWorkItem] = Field(default_factory=list)
    blocked: List[str] = Field(default_factory=list)
    possible_end_date: Optional[date] = None

    def add_unplaced(self, work_item: WorkItem, reason: str) -> None:
        """Registra um item não alocado com seu motivo"""
        self.unplaced.append(UnplacedWorkItem(
            work_item_id=work_item.id,
            title=work_item.title,
            reason=reason,
        ))

    def get_work_item(self, work_item_id: str) -> Optional[WorkItem]:
        return next((w for w in self.work_items if w.id == work_item_id), None)

    def get_sprint(self, sprint_id: str) -> Optional[Sprint]:
        return next((s for s in self.sprints if s.id == sprint_id), None)
