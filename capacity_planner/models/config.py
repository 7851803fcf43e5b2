from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


def _parse_date(v):
    if isinstance(v, str):
        try:
            return datetime.strptime(v, "%Y-%m-%d").date()
        except ValueError as e:
            raise ValueError(f"Data inválida: {v}. Formato esperado: YYYY-MM-DD") from e
    return v


class SprintConfig(BaseModel):
    """Configuração da geração de sprints"""

    first_sprint_start_date: date
    sprint_duration_days: int = Field(default=14, ge=1)
    default_velocity: float = Field(default=20, ge=0)
    starting_sprint_number: int = Field(default=1, ge=1)

    @field_validator("first_sprint_start_date", mode="before")
    @classmethod
    def validate_date(cls, v):
        """Valida e converte a string de data para date"""
        return _parse_date(v)


class SetupConfig(BaseModel):
    """Configuração principal do sistema"""

    team_file: str
    holidays_file: str
    work_items_file: str
    sprints_file: Optional[str] = None
    sprint_config: SprintConfig
    year: int
    planning_date: Optional[date] = None
    target_delivery_date: Optional[date] = None
    output_dir: str = "output"
    detect_skills: bool = False

    @field_validator("planning_date", "target_delivery_date", mode="before")
    @classmethod
    def validate_date(cls, v):
        """Valida e converte a string de data para date"""
        return _parse_date(v)
