"""
Planejador de Capacidade de Sprints

Este pacote calcula a capacidade real de cada sprint (descontando fins de semana,
feriados e ausências individuais, separada por skill) e distribui automaticamente
os itens de trabalho pendentes entre as sprints futuras, respeitando dependências,
capacidade por skill e prazos.
"""

__version__ = "1.0.0"
