"""Heurística de classificação de skill a partir do texto do item.

Não faz parte do núcleo de agendamento: o chamador decide se aplica a sugestão
antes de persistir o item.
"""
import re
from typing import Dict, List, Sequence, Tuple
from loguru import logger

from ..models.entities import Skill

FRONTEND_INDICATORS: Dict[str, Tuple[int, List[str]]] = {
    "ui": (3, ["panel", "modal", "popup", "dialog", "dropdown", "menu", "navbar", "sidebar",
               "header", "footer", "button", "form", "checkbox", "tooltip", "carousel", "spinner"]),
    "interactions": (3, ["click", "hover", "scroll", "drag", "drop", "swipe", "navigate", "redirect"]),
    "visual": (1, ["display", "layout", "responsive", "mobile", "style", "theme", "animation", "viewport"]),
    "tech": (2, ["react", "vue", "angular", "javascript", "typescript", "html", "css", "scss", "dom",
                 "browser", "client-side", "frontend"]),
    "ux": (1, ["user interface", "user experience", "usability", "accessibility", "wireframe", "mockup"]),
}

BACKEND_INDICATORS: Dict[str, Tuple[int, List[str]]] = {
    "data": (3, ["database", "sql", "query", "persist", "crud", "migration", "schema", "repository",
                 "orm", "nosql", "postgresql", "mysql"]),
    "api": (3, ["api", "endpoint", "rest", "graphql", "microservice", "controller", "middleware",
                "web service", "integration"]),
    "server": (1, ["server", "backend", "server-side", "deploy", "infrastructure", "docker",
                   "kubernetes", "cloud"]),
    "auth": (1, ["authentication", "authorization", "session", "token", "jwt", "oauth", "permission"]),
    "tech": (2, ["node.js", "express", "django", "flask", "spring", "java", "python", "php", "ruby"]),
    "logic": (1, ["business logic", "validation", "batch", "cron", "background job"]),
}


def _score(text: str, indicators: Dict[str, Tuple[int, List[str]]]) -> Tuple[int, List[str]]:
    score = 0
    found = []
    for weight, words in indicators.values():
        for word in words:
            if re.search(rf"\b{re.escape(word)}\b", text):
                score += weight
                found.append(word)
    return score, found


def analyze_text(title: str, description: str) -> Tuple[int, int]:
    """
    Pontua o texto do item para frontend e backend

    Returns:
        Tuple[int, int]: (pontuação frontend, pontuação backend)
    """
    text = f"{title} {description}".lower()
    frontend_score, frontend_found = _score(text, FRONTEND_INDICATORS)
    backend_score, backend_found = _score(text, BACKEND_INDICATORS)
    logger.debug(f"Indicadores frontend={frontend_found} backend={backend_found}")
    return frontend_score, backend_score


def detect_skills(title: str, description: str = "", current: Sequence[Skill] = ()) -> List[Skill]:
    """
    Sugere as skills de um item a partir do título e da descrição

    Marcadores explícitos no título ("FE:", "BE:", "frontend", "backend") têm
    prioridade. Depois vale a pontuação por palavras-chave, exigindo diferença de ao
    menos 2 pontos. Sem indicação clara, mantém as skills atuais (ou ambas).

    Args:
        title: Título do item
        description: Descrição do item
        current: Skills atualmente declaradas

    Returns:
        List[Skill]: Skills sugeridas
    """
    lowered = title.lower()
    title_frontend = bool(re.search(r"\bfe:|\bfrontend\b|\[fe\]", lowered))
    title_backend = bool(re.search(r"\bbe:|\bbackend\b|\[be\]", lowered))

    if title_frontend != title_backend:
        return [Skill.FRONTEND] if title_frontend else [Skill.BACKEND]

    frontend_score, backend_score = analyze_text(title, description)
    if abs(frontend_score - backend_score) >= 2:
        return [Skill.FRONTEND] if frontend_score > backend_score else [Skill.BACKEND]

    return list(current) or [Skill.FRONTEND, Skill.BACKEND]
