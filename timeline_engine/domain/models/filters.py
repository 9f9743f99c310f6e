# -*- coding: utf-8 -*-
"""
Contratos dos plugins de filtro (um por tipo de nó da IR)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class FilterDescriptor:
    """Descritor de um filtro disponível no sistema"""

    name: str
    node_type: type
    description: str = ""


class FilterContext:
    """Contexto para construção de filtros FFmpeg"""

    def __init__(self, input_label: str | None, output_label: str, **kwargs):
        self.input_label = input_label
        self.output_label = output_label
        self.params = kwargs


@dataclass
class FilterSnippet:
    """Representa um ou mais fragmentos de filtro FFmpeg"""

    filter_expr: str
    extra: list[str] = field(default_factory=list)  # filtros auxiliares antes do principal

    def parts(self) -> list[str]:
        return [*self.extra, self.filter_expr]


def fmt_number(value: float) -> str:
    """Formata números para o filtergraph (sem zeros à direita)"""
    text = f"{float(value):.6f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def enable_window(start: float, end: float) -> str:
    """Expressão enable para a janela semiaberta [start, end)"""
    return f"enable='gte(t,{fmt_number(start)})*lt(t,{fmt_number(end)})'"


class NodeFilter(Protocol):
    """Interface para implementação de filtros de nós da IR"""

    def build_filter(self, node: Any, ctx: FilterContext) -> FilterSnippet:
        """Constrói o filtro FFmpeg para este nó"""
        ...
