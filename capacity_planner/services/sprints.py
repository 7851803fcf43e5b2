from datetime import date, timedelta
from typing import Dict, List, Tuple
from loguru import logger

from ..models.entities import Sprint
from ..models.config import SprintConfig
from .dates import quarter_of


def generate_sprints_for_year(config: SprintConfig, year: int) -> List[Sprint]:
    """
    Gera a sequência determinística de sprints de um ano

    As sprints são consecutivas a partir de ``first_sprint_start_date`` e a geração
    para quando a próxima sprint começaria depois de 31/12 do ano. A numeração dentro
    do quarter recomeça em 1 a cada quarter, exceto no primeiro quarter gerado, que
    começa em ``starting_sprint_number``.

    Args:
        config: Configuração das sprints
        year: Ano usado no identificador das sprints e como limite da geração

    Returns:
        List[Sprint]: Sprints geradas
    """
    sprints: List[Sprint] = []
    year_end = date(year, 12, 31)
    duration = timedelta(days=config.sprint_duration_days - 1)

    current_start = config.first_sprint_start_date
    sprint_number = 1
    quarter_numbers: Dict[Tuple[int, int], int] = {}

    while current_start <= year_end:
        current_end = current_start + duration
        quarter_key = quarter_of(current_start)

        if quarter_key not in quarter_numbers:
            quarter_numbers[quarter_key] = (
                config.starting_sprint_number if not quarter_numbers else 1
            )
        else:
            quarter_numbers[quarter_key] += 1

        quarter, quarter_year = quarter_key
        sprints.append(Sprint(
            id=f"sprint-{year}-{sprint_number}",
            name=f"Q{quarter} {quarter_year} Sprint {quarter_numbers[quarter_key]}",
            start_date=current_start,
            end_date=current_end,
            planned_velocity=config.default_velocity,
        ))

        current_start = current_end + timedelta(days=1)
        sprint_number += 1

    logger.info(f"{len(sprints)} sprints geradas para {year}")
    return sprints
