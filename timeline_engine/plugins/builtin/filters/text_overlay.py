# -*- coding: utf-8 -*-
"""
Overlay de texto (drawtext) com janela de tempo
"""

from pathlib import Path

from ....domain.models.filters import (
    FilterContext,
    FilterSnippet,
    NodeFilter,
    enable_window,
    fmt_number,
)
from ....domain.models.plan import TimedText
from ....infra.plugins import node_filter

# Fração da largura do texto subtraída de x para cada alinhamento
ALIGN_ANCHORS = {"left": 0.0, "center": 0.5, "right": 1.0}


def escape_text(text: str) -> str:
    """Escapa texto para uso no FFmpeg drawtext"""
    text = text.replace("\\", "\\\\\\\\")
    text = text.replace("'", "'\\\\\\''")
    text = text.replace(":", "\\\\:")
    text = text.replace("%", "\\\\%")
    return text


def escape_path(path: str) -> str:
    """Escapa caminho de fonte para o FFmpeg (importante no Windows)"""
    return str(path).replace("\\", "/").replace(":", "\\:")


def font_name(family: str) -> str:
    """Primeiro nome de uma família CSS ('"Courier Prime", monospace' -> Courier Prime)"""
    return family.split(",")[0].strip().strip("\"'")


@node_filter(TimedText, name="drawtext", description="Desenha um texto durante [start, end)")
class TextOverlayFilter(NodeFilter):
    """Efeito de overlay de texto"""

    def build_filter(self, node: TimedText, ctx: FilterContext) -> FilterSnippet:
        anchor = ALIGN_ANCHORS.get(node.align, 0.5)
        parts = [
            f"text='{escape_text(node.text)}'",
            self._font_parameter(node, ctx),
            f"fontsize={fmt_number(node.font_size)}",
            f"fontcolor={node.color}",
            f"x={fmt_number(node.x)}*w-text_w*{fmt_number(anchor)}",
            f"y={fmt_number(node.y)}*h-text_h/2",
        ]

        if node.shadow:
            # drawtext não suporta desfoque de sombra; apenas cor e deslocamento
            parts.extend(
                [
                    f"shadowcolor={node.shadow.color}",
                    f"shadowx={fmt_number(node.shadow.offset_x)}",
                    f"shadowy={fmt_number(node.shadow.offset_y)}",
                ]
            )
        if node.outline:
            parts.extend(
                [
                    f"borderw={fmt_number(node.outline.width)}",
                    f"bordercolor={node.outline.color}",
                ]
            )

        parts.append(enable_window(node.start, node.end))
        return FilterSnippet(f"[{ctx.input_label}]drawtext={':'.join(parts)}[{ctx.output_label}]")

    def _font_parameter(self, node: TimedText, ctx: FilterContext) -> str:
        # Prioridade: arquivo de fonte carregado > família de fonte do sistema
        fonts_available = ctx.params.get("fonts_available") or set()
        font_dir = ctx.params.get("font_dir")
        if node.font_file and node.font_file in fonts_available:
            font_path = Path(font_dir) / node.font_file if font_dir else Path(node.font_file)
            return f"fontfile='{escape_path(font_path.as_posix())}'"
        return f"font='{font_name(node.font_family)}'"
