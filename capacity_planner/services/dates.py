from datetime import date
from typing import Dict, List, Optional, Tuple

from ..models.entities import DateInterval, Sprint


def working_days(interval: DateInterval) -> int:
    """
    Conta o número de dias úteis de um intervalo fechado (excluindo finais de semana)

    Args:
        interval: Intervalo de datas

    Returns:
        int: Número de dias úteis
    """
    total_days = (interval.end_date - interval.start_date).days + 1
    if total_days <= 0:
        return 0
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * 5
    start_weekday = interval.start_date.weekday()
    for offset in range(remainder):
        # 5 = Sábado, 6 = Domingo
        if (start_weekday + offset) % 7 < 5:
            count += 1
    return count


def overlap(a: DateInterval, b: DateInterval) -> Optional[DateInterval]:
    """
    Retorna a interseção de dois intervalos fechados

    Intervalos que apenas se tocam nas extremidades se sobrepõem em um dia.

    Returns:
        Optional[DateInterval]: Interseção ou None se forem disjuntos
    """
    start = max(a.start_date, b.start_date)
    end = min(a.end_date, b.end_date)
    if end < start:
        return None
    return DateInterval(start_date=start, end_date=end)


def contains(interval: DateInterval, day: date) -> bool:
    return interval.start_date <= day <= interval.end_date


def quarter_of(day: date) -> Tuple[int, int]:
    """Retorna (quarter, ano) de uma data"""
    return (day.month - 1) // 3 + 1, day.year


def quarter_label(day: date) -> str:
    quarter, year = quarter_of(day)
    return f"Q{quarter} {year}"


def group_sprints_by_quarter(sprints: List[Sprint]) -> List[Tuple[str, List[Sprint]]]:
    """
    Agrupa sprints pelo quarter da data de início, em ordem cronológica

    Returns:
        List[Tuple[str, List[Sprint]]]: Pares (rótulo do quarter, sprints)
    """
    groups: Dict[Tuple[int, int], List[Sprint]] = {}
    for sprint in sprints:
        groups.setdefault(quarter_of(sprint.start_date), []).append(sprint)

    return [
        (f"Q{quarter} {year}", groups[(quarter, year)])
        for quarter, year in sorted(groups, key=lambda k: (k[1], k[0]))
    ]


def format_date_range(start_date: date, end_date: date) -> str:
    return f"{start_date.strftime('%b %d')} - {end_date.strftime('%b %d, %Y')}"
