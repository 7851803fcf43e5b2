import json
from datetime import date
from pathlib import Path
from typing import List, Tuple
import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from capacity_planner.models.config import SetupConfig, SprintConfig
from capacity_planner.models.entities import PublicHoliday, Sprint, TeamMember, WorkItem
from capacity_planner.services.capacity import sprint_capacity, sprint_skill_capacities
from capacity_planner.services.dates import format_date_range
from capacity_planner.services.forecast import forecast_delivery, forecast_summary
from capacity_planner.services.report import PlanReportGenerator
from capacity_planner.services.session import PlanningSession
from capacity_planner.services.skills import detect_skills
from capacity_planner.services.sprints import generate_sprints_for_year
from capacity_planner.services.velocity import (
    analyze_velocity_trends,
    recommend_sprint_velocity,
    velocity_recommendations,
)

app = typer.Typer(help="Planejador de Capacidade de Sprints")
console = Console()


def configurar_logger(output_dir: Path = Path("logs")):
    """Configura o sistema de logs"""
    output_dir.mkdir(exist_ok=True)

    logger.remove()  # Remove handlers padrão
    logger.add(
        output_dir / "planejador_{time}.log",
        rotation="1 day",
        retention="7 days",
        level="INFO",
        encoding='utf-8'
    )
    logger.add(lambda msg: console.print(msg, style="blue", end="", markup=False, highlight=False), level="INFO")


def load_json_file(path: Path):
    """
    Carrega um arquivo JSON

    Args:
        path: Caminho do arquivo

    Returns:
        Conteúdo do arquivo
    """
    try:
        return json.loads(path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        logger.error(f"Erro ao carregar arquivo {path}: {str(e)}")
        raise typer.Exit(1)


def load_setup(config_dir: Path) -> SetupConfig:
    return SetupConfig(**load_json_file(config_dir / "setup.json"))


def load_inputs(
    setup: SetupConfig, config_dir: Path
) -> Tuple[List[TeamMember], List[PublicHoliday], List[WorkItem], List[Sprint]]:
    """
    Carrega time, feriados, itens e sprints descritos na configuração

    Caminhos relativos são resolvidos a partir do diretório de configuração. Sem
    arquivo de sprints, as sprints são geradas a partir da configuração de sprints.
    """
    members = [TeamMember(**m) for m in load_json_file(config_dir / setup.team_file)]
    holidays = [PublicHoliday(**h) for h in load_json_file(config_dir / setup.holidays_file)]
    work_items = [WorkItem(**w) for w in load_json_file(config_dir / setup.work_items_file)]

    if setup.sprints_file:
        sprints = [Sprint(**s) for s in load_json_file(config_dir / setup.sprints_file)]
    else:
        sprints = generate_sprints_for_year(setup.sprint_config, setup.year)

    if setup.detect_skills:
        for item in work_items:
            if not item.required_skills and not item.is_epic:
                item.required_skills = detect_skills(item.title, item.description)
                logger.info(f"Skills detectadas para {item.id}: {[s.value for s in item.required_skills]}")

    return members, holidays, work_items, sprints


@app.command()
def planejar(
    config_dir: Path = typer.Option(
        "config",
        help="Diretório com os arquivos de configuração",
        exists=True,
        dir_okay=True,
        file_okay=False
    ),
    team_name: str = typer.Option("Time", help="Nome do time usado nos relatórios"),
    relatorios: bool = typer.Option(True, help="Gera relatórios em Markdown, PDF e Excel"),
):
    """Executa o planejamento automático das sprints"""
    try:
        configurar_logger()
        logger.info("Iniciando execução do planejador")
        logger.info(f"Usando diretório de configuração: {config_dir}")

        setup = load_setup(config_dir)
        members, holidays, work_items, sprints = load_inputs(setup, config_dir)

        session = PlanningSession(work_items, sprints, members, holidays, planning_date=setup.planning_date)
        result = session.auto_assign()

        output_dir = Path(setup.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        plan_path = output_dir / "plano.json"
        plan_path.write_text(result.model_dump_json(indent=2), encoding='utf-8')
        logger.info(f"Plano salvo em {plan_path}")

        for recommendation in velocity_recommendations(analyze_velocity_trends(result.sprints), members):
            logger.info(f"Recomendação: {recommendation}")

        forecast = forecast_delivery(
            result.work_items,
            result.sprints,
            members,
            holidays,
            reference_date=setup.planning_date or date.today(),
            target_date=setup.target_delivery_date,
        )
        for line in forecast_summary(forecast):
            logger.info(f"Previsão: {line}")

        if relatorios:
            PlanReportGenerator(result, members, holidays, str(output_dir), team_name).generate()

        logger.info("Processo concluído com sucesso!")

    except typer.Exit:
        raise
    except Exception as e:
        logger.error(f"Erro durante execução: {str(e)}")
        raise typer.Exit(1)


@app.command("gerar-sprints")
def gerar_sprints(
    sprint_config_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON com a configuração de sprints"),
    year: int = typer.Option(..., help="Ano das sprints"),
    output: Path = typer.Option(Path("output/sprints.json"), help="Arquivo de saída"),
):
    """Gera as sprints de um ano a partir da configuração"""
    try:
        config = SprintConfig(**load_json_file(sprint_config_file))
        sprints = generate_sprints_for_year(config, year)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(
            json.dumps([s.model_dump(mode="json") for s in sprints], indent=2, ensure_ascii=False),
            encoding='utf-8'
        )
        console.print(f"{len(sprints)} sprints geradas em {output}")
    except typer.Exit:
        raise
    except Exception as e:
        logger.error(f"Erro ao gerar sprints: {str(e)}")
        raise typer.Exit(1)


@app.command()
def capacidade(
    config_dir: Path = typer.Option(
        "config",
        help="Diretório com os arquivos de configuração",
        exists=True,
        dir_okay=True,
        file_okay=False
    ),
):
    """Exibe a capacidade de cada sprint por skill e a previsão de entrega"""
    try:
        setup = load_setup(config_dir)
        members, holidays, work_items, sprints = load_inputs(setup, config_dir)
        analysis = analyze_velocity_trends(sprints)

        table = Table(title="Capacidade por Sprint")
        for column in ("Sprint", "Período", "Frontend", "Backend", "Total", "Agregada", "Velocidade sugerida"):
            table.add_column(column)

        for sprint in sprints:
            capacities = sprint_skill_capacities(sprint, members, holidays)
            recommendation = recommend_sprint_velocity(analysis, sprint.planned_velocity)
            table.add_row(
                sprint.name,
                format_date_range(sprint.start_date, sprint.end_date),
                f"{capacities.frontend:.1f}",
                f"{capacities.backend:.1f}",
                f"{capacities.total:.1f}",
                f"{sprint_capacity(sprint, members, holidays):.1f}",
                f"{recommendation.recommended_velocity:g}",
            )

        console.print(table)

        forecast = forecast_delivery(
            work_items,
            sprints,
            members,
            holidays,
            reference_date=setup.planning_date or date.today(),
            target_date=setup.target_delivery_date,
        )
        console.print("Previsão de entrega", style="bold")
        for line in forecast_summary(forecast):
            console.print(line, markup=False, highlight=False)

    except typer.Exit:
        raise
    except Exception as e:
        logger.error(f"Erro ao calcular capacidade: {str(e)}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
