# -*- coding: utf-8 -*-
"""
Streams de áudio atrasados e mixagem final
"""

from ....domain.models.filters import FilterContext, FilterSnippet, NodeFilter, fmt_number
from ....domain.models.plan import AudioMix, DelayedAudio
from ....infra.plugins import node_filter


@node_filter(DelayedAudio, name="adelay", description="Atrasa o áudio do clipe até o seu início")
class DelayedAudioFilter(NodeFilter):
    """Corta, ajusta volume e atrasa o áudio de um clipe"""

    def build_filter(self, node: DelayedAudio, ctx: FilterContext) -> FilterSnippet:
        delay_ms = int(round(node.delay * 1000))
        return FilterSnippet(
            f"[{node.input_index}:a]"
            f"atrim=start={fmt_number(node.source_in)}:duration={fmt_number(node.duration)},"
            f"asetpts=PTS-STARTPTS,"
            f"volume={fmt_number(node.volume)},"
            f"adelay={delay_ms}:all=1[{ctx.output_label}]"
        )


@node_filter(AudioMix, name="amix", description="Mixa todos os streams de áudio")
class AudioMixFilter(NodeFilter):
    """Mixa os streams atrasados em uma única saída"""

    def build_filter(self, node: AudioMix, ctx: FilterContext) -> FilterSnippet:
        inputs = "".join(f"[{label}]" for label in node.inputs)
        return FilterSnippet(
            f"{inputs}amix=inputs={len(node.inputs)}:duration=longest:normalize=0[{ctx.output_label}]"
        )
