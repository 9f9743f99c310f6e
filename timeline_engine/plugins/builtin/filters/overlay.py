# -*- coding: utf-8 -*-
"""
Overlay de vídeo com janela de tempo
"""

from ....domain.models.filters import (
    FilterContext,
    FilterSnippet,
    NodeFilter,
    enable_window,
    fmt_number,
)
from ....domain.models.plan import TimedOverlay
from ....infra.plugins import node_filter


@node_filter(TimedOverlay, name="overlay", description="Sobrepõe um clipe de vídeo durante [start, end)")
class OverlayFilter(NodeFilter):
    """Prepara a entrada (corte, deslocamento no tempo, escala) e sobrepõe"""

    def build_filter(self, node: TimedOverlay, ctx: FilterContext) -> FilterSnippet:
        canvas = ctx.params["canvas"]
        source_label = f"{ctx.output_label}src"

        # Desloca os timestamps para que o clipe comece em node.start
        prepare = (
            f"[{node.input_index}:v]"
            f"trim=start={fmt_number(node.source_in)}:duration={fmt_number(node.duration)},"
            f"setpts=PTS-STARTPTS+{fmt_number(node.start)}/TB,"
            f"scale={canvas.width}:{canvas.height}:force_original_aspect_ratio=decrease"
            f"[{source_label}]"
        )
        overlay = (
            f"[{ctx.input_label}][{source_label}]"
            f"overlay=x=(W-w)/2:y=(H-h)/2:eof_action=pass:"
            f"{enable_window(node.start, node.end)}[{ctx.output_label}]"
        )
        return FilterSnippet(overlay, extra=[prepare])
