# -*- coding: utf-8 -*-
"""
Representação intermediária (IR) do plano de exportação

O GraphBuilder produz um ExportPlan tipado; a serialização para a sintaxe
de filtergraph do FFmpeg fica em rendering/filtergraph.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .clip import TextOutline, TextShadow

BASE_LABEL = "base"
AUDIO_MIX_LABEL = "aout"


@dataclass(frozen=True)
class RenderSettings:
    """Configurações de renderização"""

    container: str  # "mp4"
    vcodec: str  # "libx264" | "h264_nvenc" | "hevc_nvenc" | "libx265"
    acodec: str  # "aac"
    crf: int  # 18-23
    preset: str  # "ultrafast"
    audio_bitrate: str  # "192k"
    hwaccel: str | None = None  # "cuda"|"qsv"|"vaapi"|None


@dataclass(frozen=True)
class MediaInput:
    """Entrada do encoder (uma por clipe com mídia)"""

    index: int
    clip_id: str
    source: str
    filename: str
    still_image: bool = False
    duration: float = 0.0  # usado para imagens estáticas (-loop 1 -t)


@dataclass(frozen=True)
class BaseCanvas:
    """Canvas preto de tamanho fixo com a duração total"""

    width: int
    height: int
    duration: float
    frame_rate: int = 30
    color: str = "black"
    label: str = BASE_LABEL


@dataclass(frozen=True)
class TimedOverlay:
    """Overlay de um clipe de vídeo, ativo apenas em [start, end)"""

    label: str
    input_label: str
    input_index: int
    clip_id: str
    start: float
    end: float
    source_in: float = 0.0

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class TimedText:
    """Desenho de texto, ativo apenas em [start, end)"""

    label: str
    input_label: str
    clip_id: str
    text: str
    font_family: str
    font_file: Optional[str]
    font_size: float
    color: str
    x: float
    y: float
    start: float
    end: float
    align: str = "center"
    shadow: Optional[TextShadow] = None
    outline: Optional[TextOutline] = None


@dataclass(frozen=True)
class DelayedAudio:
    """Stream de áudio atrasado até o início do clipe"""

    label: str
    input_index: int
    clip_id: str
    delay: float
    duration: float
    source_in: float = 0.0
    volume: float = 1.0


@dataclass(frozen=True)
class AudioMix:
    """Mixagem de todos os streams de áudio em uma única saída"""

    inputs: tuple[str, ...]
    label: str = AUDIO_MIX_LABEL


@dataclass(frozen=True)
class SkippedClip:
    """Clipe ignorado na exportação (com aviso)"""

    clip_id: str
    reason: str


VisualNode = Union[TimedOverlay, TimedText]
PlanNode = Union[BaseCanvas, TimedOverlay, TimedText, DelayedAudio, AudioMix]


@dataclass(frozen=True)
class ExportPlan:
    """Grafo de processamento completo de uma exportação"""

    canvas: BaseCanvas
    inputs: tuple[MediaInput, ...] = ()
    visual_chain: tuple[VisualNode, ...] = ()
    audio_streams: tuple[DelayedAudio, ...] = ()
    audio_mix: Optional[AudioMix] = None
    skipped: tuple[SkippedClip, ...] = ()

    @property
    def duration(self) -> float:
        return self.canvas.duration

    @property
    def video_output(self) -> str:
        """Rótulo da saída final da cadeia visual"""
        if self.visual_chain:
            return self.visual_chain[-1].label
        return self.canvas.label

    @property
    def audio_output(self) -> Optional[str]:
        return self.audio_mix.label if self.audio_mix else None

    @property
    def outputs(self) -> dict[str, str]:
        """Saídas nomeadas do plano: vídeo sempre, áudio se houver"""
        outputs = {"video": self.video_output}
        if self.audio_output:
            outputs["audio"] = self.audio_output
        return outputs

    @property
    def nodes(self) -> tuple[PlanNode, ...]:
        mix = (self.audio_mix,) if self.audio_mix else ()
        return (self.canvas, *self.visual_chain, *self.audio_streams, *mix)

    @property
    def text_nodes(self) -> tuple[TimedText, ...]:
        return tuple(n for n in self.visual_chain if isinstance(n, TimedText))

    @property
    def is_empty(self) -> bool:
        return not self.visual_chain and not self.audio_streams
