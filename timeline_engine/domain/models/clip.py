# -*- coding: utf-8 -*-
"""
Modelos de domínio para clipes da timeline
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Literal, Mapping, Optional
from uuid import uuid4

from ..errors import InvalidClipError

ClipKind = Literal["video", "audio", "text"]
TextAlign = Literal["left", "center", "right"]

CLIP_KINDS = ("video", "audio", "text")
TEXT_ALIGNS = ("left", "center", "right")

# Tracks padrão do editor (outras podem ser criadas livremente)
VIDEO_TRACK = "video"
AUDIO_TRACK_1 = "audio1"
DEFAULT_TRACKS = (VIDEO_TRACK, AUDIO_TRACK_1)


def new_clip_id(kind: str = "clip") -> str:
    """Gera um id único, nunca reutilizado"""
    return f"{kind}-{uuid4().hex}"


@dataclass(frozen=True)
class TextShadow:
    """Sombra de um texto"""

    color: str = "#000000"
    blur: float = 4.0
    offset_x: float = 2.0
    offset_y: float = 2.0


@dataclass(frozen=True)
class TextOutline:
    """Contorno de um texto"""

    color: str = "#000000"
    width: float = 2.0


@dataclass(frozen=True)
class Clip:
    """Representa um elemento da timeline (vídeo, áudio ou texto)"""

    kind: ClipKind
    track: str
    start: float
    duration: float
    name: str = ""
    id: str = ""
    # Vídeo/áudio
    source: Optional[str] = None
    source_in: float = 0.0  # deslocamento dentro da mídia de origem
    volume: Optional[float] = None
    has_audio: bool = False  # vídeo com trilha de áudio a ser mixada
    # Texto
    text: Optional[str] = None
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    color: Optional[str] = None
    align: TextAlign = "center"
    position: tuple[float, float] = (0.5, 0.5)
    shadow: Optional[TextShadow] = None
    outline: Optional[TextOutline] = None

    def __post_init__(self):
        if self.kind not in CLIP_KINDS:
            raise InvalidClipError(f"Tipo de clipe desconhecido: {self.kind!r}")
        if not self.id:
            object.__setattr__(self, "id", new_clip_id(self.kind))
        if not _finite(self.duration) or self.duration <= 0:
            raise InvalidClipError(f"Duração deve ser positiva: {self.duration}")
        if not _finite(self.start) or self.start < 0:
            raise InvalidClipError(f"Início não pode ser negativo: {self.start}")
        if not _finite(self.source_in) or self.source_in < 0:
            raise InvalidClipError(f"Ponto de entrada inválido: {self.source_in}")
        if self.volume is not None and not (_finite(self.volume) and 0.0 <= self.volume <= 1.0):
            raise InvalidClipError(f"Volume deve estar em [0, 1]: {self.volume}")
        if self.align not in TEXT_ALIGNS:
            raise InvalidClipError(f"Alinhamento inválido: {self.align!r}")
        if not isinstance(self.position, tuple) or len(self.position) != 2:
            raise InvalidClipError(f"Posição deve ter duas coordenadas (x, y): {self.position!r}")
        x, y = self.position
        if not (_finite(x) and _finite(y) and 0.0 <= x <= 1.0 and 0.0 <= y <= 1.0):
            raise InvalidClipError(f"Posição deve ser normalizada em [0, 1]: {self.position}")
        if self.font_size is not None and not (_finite(self.font_size) and self.font_size > 0):
            raise InvalidClipError(f"Tamanho de fonte inválido: {self.font_size}")

    @property
    def end(self) -> float:
        return self.start + self.duration

    @property
    def gain(self) -> float:
        """Volume efetivo (None equivale a 1.0)"""
        return 1.0 if self.volume is None else self.volume

    @property
    def carries_audio(self) -> bool:
        """Indica se o clipe contribui para a mixagem de áudio"""
        return self.kind == "audio" or (self.kind == "video" and self.has_audio)

    def contains(self, time: float) -> bool:
        """Verifica se o instante está em [start, end)"""
        return self.start <= time < self.end

    def has_text_style(self) -> bool:
        """Verifica se todos os atributos obrigatórios de texto estão presentes"""
        return bool(self.text) and bool(self.font_family) and bool(self.font_size) and bool(self.color)

    def with_changes(self, **changes: Any) -> "Clip":
        """Retorna uma cópia com os campos alterados (validada novamente)"""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["position"] = list(self.position)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Clip":
        """Cria um clipe a partir de um dicionário (chaves snake_case ou camelCase)"""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name in known:
                values[name] = value

        if "kind" not in values:
            raise InvalidClipError("Clipe sem tipo ('kind'/'type')")
        values.setdefault("track", VIDEO_TRACK if values["kind"] != "audio" else AUDIO_TRACK_1)
        values.setdefault("start", 0.0)
        if "duration" not in values:
            raise InvalidClipError("Clipe sem duração")

        position = values.get("position")
        try:
            if isinstance(position, Mapping):
                values["position"] = (float(position["x"]), float(position["y"]))
            elif position is not None:
                values["position"] = tuple(float(v) for v in position)

            if isinstance(values.get("shadow"), Mapping):
                values["shadow"] = TextShadow(**_snake_keys(values["shadow"]))
            if isinstance(values.get("outline"), Mapping):
                values["outline"] = TextOutline(**_snake_keys(values["outline"]))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidClipError(f"Clipe com estilo ou posição inválidos: {e}") from e

        return cls(**values)


_ALIASES = {
    "type": "kind",
    "src": "source",
    "sourceIn": "source_in",
    "hasAudio": "has_audio",
    "fontFamily": "font_family",
    "fontSize": "font_size",
}


def _snake_keys(data: Mapping[str, Any]) -> dict:
    return {
        "offset_x" if k == "offsetX" else "offset_y" if k == "offsetY" else k: v
        for k, v in data.items()
    }


def _finite(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)
