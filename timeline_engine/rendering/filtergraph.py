# -*- coding: utf-8 -*-
"""
Serialização do ExportPlan para um filtergraph FFmpeg
"""

from typing import AbstractSet, Dict, List, Optional

from ..domain.models.filters import FilterContext
from ..domain.models.plan import ExportPlan, MediaInput
from ..infra.logging import get_logger
from ..infra.plugins import plugin_registry

# Registra os filtros embutidos no plugin_registry
from ..plugins.builtin.filters import audio, canvas, overlay, text_overlay  # noqa: F401


class FilterGraph:
    """Representa um filtergraph FFmpeg"""

    def __init__(self):
        self.filters: List[str] = []
        self.inputs: List[MediaInput] = []
        self.outputs: Dict[str, str] = {}

    def add_input(self, media_input: MediaInput):
        """Adiciona um input ao comando"""
        self.inputs.append(media_input)

    def add_filter(self, filter_expr: str):
        """Adiciona um filtro ao graph"""
        self.filters.append(filter_expr)

    def to_string(self) -> str:
        """Converte o filtergraph para string FFmpeg"""
        return ";".join(self.filters)


def compile_plan(
    plan: ExportPlan,
    fonts_available: Optional[AbstractSet[str]] = None,
    font_dir: Optional[str] = None,
) -> FilterGraph:
    """Traduz cada nó da IR no seu filtro, na ordem do plano"""
    logger = get_logger("FilterGraph")
    graph = FilterGraph()
    for media_input in plan.inputs:
        graph.add_input(media_input)

    for node in plan.nodes:
        filter_class = plugin_registry.get_filter(type(node))
        if filter_class is None:
            raise TypeError(f"Nenhum filtro registrado para {type(node).__name__}")

        ctx = FilterContext(
            getattr(node, "input_label", None),
            node.label,
            canvas=plan.canvas,
            fonts_available=fonts_available or set(),
            font_dir=font_dir,
        )
        for part in filter_class().build_filter(node, ctx).parts():
            graph.add_filter(part)

    graph.outputs = dict(plan.outputs)
    logger.debug("Filtergraph construído: %s", graph.to_string())
    return graph
