# -*- coding: utf-8 -*-
"""
Canvas base: fundo sólido com a duração total da timeline
"""

from ....domain.models.filters import FilterContext, FilterSnippet, NodeFilter, fmt_number
from ....domain.models.plan import BaseCanvas
from ....infra.plugins import node_filter


@node_filter(BaseCanvas, name="canvas", description="Fundo sólido de tamanho fixo")
class CanvasFilter(NodeFilter):
    """Gera o fundo com o filtro color"""

    def build_filter(self, node: BaseCanvas, ctx: FilterContext) -> FilterSnippet:
        return FilterSnippet(
            f"color=c={node.color}:s={node.width}x{node.height}"
            f":r={node.frame_rate}:d={fmt_number(node.duration)}[{ctx.output_label}]"
        )
