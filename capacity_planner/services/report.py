from typing import List, Sequence
from pathlib import Path
from loguru import logger
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, TableStyle, LongTable
from reportlab.lib.enums import TA_LEFT, TA_CENTER
import openpyxl
from openpyxl.styles import PatternFill, Border, Side, Alignment, Font
from openpyxl.utils import get_column_letter

from ..models.entities import PlanResult, PublicHoliday, Skill, TeamMember
from .capacity import TOTAL_LANE, assigned_points, sprint_capacity, sprint_skill_capacities
from .epics import summarize_epics


class PlanReportGenerator:
    """Serviço responsável pela geração de relatórios do planejamento"""

    def __init__(
        self,
        result: PlanResult,
        team_members: Sequence[TeamMember],
        public_holidays: Sequence[PublicHoliday],
        output_dir: str,
        team_name: str = "Time",
    ):
        """
        Inicializa o gerador de relatórios

        Args:
            result: Resultado do planejamento
            team_members: Membros do time
            public_holidays: Feriados
            output_dir: Diretório de saída dos relatórios
            team_name: Nome do time
        """
        self.result = result
        self.team_members = list(team_members)
        self.public_holidays = list(public_holidays)
        self.output_dir = Path(output_dir)
        self.team_name = team_name

        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.styles = getSampleStyleSheet()
        self._setup_styles()

        self.excel_colors = {
            'over': PatternFill(start_color='FFB3B3', end_color='FFB3B3', fill_type='solid'),     # Vermelho claro
            'full': PatternFill(start_color='B3FFB3', end_color='B3FFB3', fill_type='solid'),     # Verde claro
            'partial': PatternFill(start_color='B3D1FF', end_color='B3D1FF', fill_type='solid'),  # Azul claro
            'empty': PatternFill(start_color='FFFFB3', end_color='FFFFB3', fill_type='solid')     # Amarelo claro
        }

    def _setup_styles(self):
        """Configura estilos personalizados para o relatório"""
        self.styles.add(ParagraphStyle(
            name='CustomTitle',
            parent=self.styles['Title'],
            fontSize=16,
            spaceAfter=30,
            textColor=colors.HexColor('#FF6B00'),  # Laranja
            alignment=TA_CENTER
        ))
        self.styles.add(ParagraphStyle(
            name='CustomHeading1',
            parent=self.styles['Heading1'],
            fontSize=14,
            spaceAfter=12,
            textColor=colors.HexColor('#FF6B00'),
            alignment=TA_LEFT
        ))
        self.styles.add(ParagraphStyle(
            name='NormalWrap',
            parent=self.styles['Normal'],
            fontSize=10,
            leading=12,
            spaceAfter=6,
            alignment=TA_LEFT
        ))
        self.styles.add(ParagraphStyle(
            name='TableCell',
            parent=self.styles['Normal'],
            fontSize=9,
            leading=11,
            alignment=TA_LEFT
        ))
        self.styles.add(ParagraphStyle(
            name='TableHeader',
            parent=self.styles['Normal'],
            fontSize=10,
            leading=12,
            alignment=TA_LEFT,
            fontName='Helvetica-Bold',
            textColor=colors.white
        ))

    def _create_table_style(self, header_bg_color=colors.HexColor('#FF6B00')):
        """Cria um estilo padrão para as tabelas"""
        return TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), header_bg_color),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 1, colors.black),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('LEFTPADDING', (0, 0), (-1, -1), 6),
            ('RIGHTPADDING', (0, 0), (-1, -1), 6),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#FFF5EB')]),
        ])

    def build_sprint_rows(self) -> List[dict]:
        """
        Consolida capacidade e uso de cada sprint

        Returns:
            List[dict]: Uma linha por sprint com capacidades, pontos usados e itens
        """
        rows = []
        for sprint in self.result.sprints:
            capacities = sprint_skill_capacities(sprint, self.team_members, self.public_holidays)
            used = assigned_points(sprint, self.result.work_items)
            rows.append({
                "sprint": sprint,
                "frontend": capacities.frontend,
                "backend": capacities.backend,
                "total": capacities.total,
                "aggregate": sprint_capacity(sprint, self.team_members, self.public_holidays),
                "used_frontend": used[Skill.FRONTEND.value],
                "used_backend": used[Skill.BACKEND.value],
                "used_total": used[TOTAL_LANE],
                "items": [w for w in self.result.work_items if sprint.id in w.assigned_sprints and not w.is_epic],
            })
        return rows

    def _generate_markdown(self, rows: List[dict]) -> str:
        """Gera o conteúdo do relatório em Markdown"""
        report = []

        report.append(f"# Relatório de Planejamento - {self.team_name}")
        report.append("")

        # 1. Resumo
        placed = sum(len(row["items"]) for row in rows)
        report.append("## 1. Resumo Geral")
        report.append("")
        report.append(f"- **Sprints:** {len(self.result.sprints)}")
        report.append(f"- **Itens alocados:** {placed}")
        report.append(f"- **Itens não alocados:** {len(self.result.unplaced)}")
        report.append(f"- **Itens bloqueados:** {len(self.result.blocked)}")
        end_date = self.result.possible_end_date.strftime('%d/%m/%Y') if self.result.possible_end_date else '-'
        report.append(f"- **Término previsto:** {end_date}")
        report.append("")

        # 2. Capacidade por sprint
        report.append("## 2. Capacidade por Sprint")
        report.append("")
        report.append("| Sprint | Período | Frontend | Backend | Total | Agregada | Utilizada |")
        report.append("|--------|---------|----------|---------|-------|----------|-----------|")
        for row in rows:
            sprint = row["sprint"]
            report.append(
                f"| {sprint.name} | {sprint.start_date.strftime('%d/%m/%Y')} - {sprint.end_date.strftime('%d/%m/%Y')} "
                f"| {row['used_frontend']:.1f}/{row['frontend']:.1f} | {row['used_backend']:.1f}/{row['backend']:.1f} "
                f"| {row['used_total']:.1f}/{row['total']:.1f} | {row['aggregate']:.1f} | {_utilization(row):.0f}% |"
            )
        report.append("")

        # 3. Itens por sprint
        report.append("## 3. Itens Planejados")
        report.append("")
        report.append("| Sprint | ID | Título | Pontos | Skills | Prazo |")
        report.append("|--------|----|--------|--------|--------|-------|")
        for row in rows:
            for item in row["items"]:
                skills = ", ".join(s.value for s in item.required_skills) or '-'
                report.append(
                    f"| {row['sprint'].name} | {item.id} | {item.title} | {item.estimate_story_points:g} "
                    f"| {skills} | {item.required_completion_date.strftime('%d/%m/%Y')} |"
                )
        report.append("")

        # 4. Itens não alocados
        if self.result.unplaced:
            report.append("## 4. Itens não Alocados")
            report.append("")
            report.append("| ID | Título | Motivo |")
            report.append("|----|--------|--------|")
            for unplaced in self.result.unplaced:
                report.append(f"| {unplaced.work_item_id} | {unplaced.title} | {unplaced.reason} |")
            report.append("")

        # 5. Itens bloqueados
        if self.result.blocked:
            report.append("## 5. Itens Bloqueados")
            report.append("")
            for item_id in self.result.blocked:
                item = self.result.get_work_item(item_id)
                report.append(f"- {item_id}: {item.title if item else '-'} (dependências: {', '.join(item.dependencies) if item else '-'})")
            report.append("")

        # 6. Épicos
        epics = summarize_epics(self.result.work_items)
        if epics:
            report.append("## 6. Épicos")
            report.append("")
            report.append("| Épico | Itens | Pontos | Concluído |")
            report.append("|-------|-------|--------|-----------|")
            for epic in epics:
                report.append(
                    f"| {epic.title} | {len(epic.children)} | {epic.total_story_points:g} "
                    f"| {epic.completion_percentage:.0f}% |"
                )
            report.append("")

        return "\n".join(report)

    def _generate_pdf(self, rows: List[dict], pdf_path: Path) -> None:
        """Gera o relatório em PDF"""
        doc = SimpleDocTemplate(
            str(pdf_path),
            pagesize=landscape(A4),
            rightMargin=2*cm,
            leftMargin=2*cm,
            topMargin=2*cm,
            bottomMargin=2*cm
        )
        available_width = doc.width
        elements = []

        elements.append(Paragraph(f"Planejamento de Sprints - {self.team_name}", self.styles['CustomTitle']))
        elements.append(Spacer(1, 12))

        elements.append(Paragraph("1. Capacidade por Sprint", self.styles['CustomHeading1']))
        header = ['Sprint', 'Período', 'Frontend', 'Backend', 'Total', 'Agregada', 'Utilizada']
        capacity_data = [[Paragraph(h, self.styles['TableHeader']) for h in header]]
        for row in rows:
            sprint = row["sprint"]
            capacity_data.append([
                Paragraph(sprint.name, self.styles['TableCell']),
                Paragraph(
                    f"{sprint.start_date.strftime('%d/%m/%Y')} a {sprint.end_date.strftime('%d/%m/%Y')}",
                    self.styles['TableCell']
                ),
                f"{row['used_frontend']:.1f}/{row['frontend']:.1f}",
                f"{row['used_backend']:.1f}/{row['backend']:.1f}",
                f"{row['used_total']:.1f}/{row['total']:.1f}",
                f"{row['aggregate']:.1f}",
                f"{_utilization(row):.0f}%",
            ])
        capacity_table = LongTable(
            capacity_data,
            colWidths=[available_width * w for w in (0.2, 0.2, 0.12, 0.12, 0.12, 0.12, 0.12)]
        )
        capacity_table.setStyle(self._create_table_style())
        elements.append(capacity_table)
        elements.append(Spacer(1, 12))

        if self.result.unplaced:
            elements.append(Paragraph("2. Itens não Alocados", self.styles['CustomHeading1']))
            unplaced_data = [[
                Paragraph('ID', self.styles['TableHeader']),
                Paragraph('Título', self.styles['TableHeader']),
                Paragraph('Motivo', self.styles['TableHeader'])
            ]]
            for unplaced in self.result.unplaced:
                unplaced_data.append([
                    Paragraph(unplaced.work_item_id, self.styles['TableCell']),
                    Paragraph(unplaced.title, self.styles['TableCell']),
                    Paragraph(unplaced.reason, self.styles['TableCell'])
                ])
            unplaced_table = LongTable(
                unplaced_data,
                colWidths=[available_width * 0.15, available_width * 0.45, available_width * 0.4]
            )
            unplaced_table.setStyle(self._create_table_style())
            elements.append(unplaced_table)
            elements.append(Spacer(1, 12))

        doc.build(elements)
        logger.info(f"Relatório PDF gerado em {pdf_path}")

    def _generate_excel(self, rows: List[dict], excel_path: Path) -> None:
        """Gera o relatório em Excel com a utilização de cada raia colorida"""
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Capacidade"

        thin = Side(style='thin')
        header = ['Sprint', 'Início', 'Fim', 'Frontend', 'Usado FE', 'Backend', 'Usado BE',
                  'Total', 'Usado Total', 'Agregada', 'Itens']
        for col, title in enumerate(header, start=1):
            cell = ws.cell(row=1, column=col, value=title)
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal='center')
            cell.border = Border(left=thin, right=thin, top=thin, bottom=thin)
            ws.column_dimensions[get_column_letter(col)].width = 15
        ws.column_dimensions['A'].width = 25
        ws.column_dimensions[get_column_letter(len(header))].width = 50

        for row_index, row in enumerate(rows, start=2):
            sprint = row["sprint"]
            values = [
                sprint.name,
                sprint.start_date,
                sprint.end_date,
                round(row["frontend"], 1),
                round(row["used_frontend"], 1),
                round(row["backend"], 1),
                round(row["used_backend"], 1),
                round(row["total"], 1),
                round(row["used_total"], 1),
                round(row["aggregate"], 1),
                ", ".join(item.id for item in row["items"]),
            ]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(row=row_index, column=col, value=value)
                cell.border = Border(left=thin, right=thin, top=thin, bottom=thin)
                if col in (2, 3):
                    cell.number_format = 'dd/mm/yyyy'

            # Colore as colunas de uso conforme a ocupação da raia
            self._apply_utilization_color(ws.cell(row=row_index, column=5), row["used_frontend"], row["frontend"])
            self._apply_utilization_color(ws.cell(row=row_index, column=7), row["used_backend"], row["backend"])
            self._apply_utilization_color(ws.cell(row=row_index, column=9), row["used_total"], row["total"])

        if self.result.unplaced:
            unplaced_ws = wb.create_sheet("Não alocados")
            for col, title in enumerate(['ID', 'Título', 'Motivo'], start=1):
                unplaced_ws.cell(row=1, column=col, value=title).font = Font(bold=True)
            for row_index, unplaced in enumerate(self.result.unplaced, start=2):
                unplaced_ws.cell(row=row_index, column=1, value=unplaced.work_item_id)
                unplaced_ws.cell(row=row_index, column=2, value=unplaced.title)
                unplaced_ws.cell(row=row_index, column=3, value=unplaced.reason)

        wb.save(str(excel_path))
        logger.info(f"Relatório Excel gerado em {excel_path}")

    def _apply_utilization_color(self, cell, used: float, capacity: float) -> None:
        """
        Aplica a cor apropriada baseada na ocupação

        Args:
            cell: Célula do Excel
            used: Pontos utilizados
            capacity: Capacidade da raia
        """
        if used > capacity:
            cell.fill = self.excel_colors['over']
        elif used > 0 and used >= capacity * 0.8:
            cell.fill = self.excel_colors['full']
        elif used > 0:
            cell.fill = self.excel_colors['partial']
        else:
            cell.fill = self.excel_colors['empty']

    def generate(self) -> List[Path]:
        """
        Gera o relatório do planejamento em Markdown, PDF e Excel

        Returns:
            List[Path]: Arquivos gerados
        """
        rows = self.build_sprint_rows()
        base_name = f"planejamento_{self.team_name.replace(' ', '_')}"

        markdown_path = self.output_dir / f"{base_name}.md"
        markdown_path.write_text(self._generate_markdown(rows), encoding='utf-8')
        logger.info(f"Relatório Markdown gerado em {markdown_path}")

        pdf_path = self.output_dir / f"{base_name}.pdf"
        self._generate_pdf(rows, pdf_path)

        excel_path = self.output_dir / f"{base_name}.xlsx"
        self._generate_excel(rows, excel_path)

        return [markdown_path, pdf_path, excel_path]


def _utilization(row: dict) -> float:
    return (row["used_total"] / row["total"] * 100) if row["total"] > 0 else 0.0
