# -*- coding: utf-8 -*-
"""
Resolução de visibilidade: quais clipes estão ativos em um instante

Funções puras usadas pelo preview ao vivo.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import combinations
from typing import Iterable, Optional, Sequence

from .models.clip import Clip


@dataclass(frozen=True)
class VisibleClips:
    """Clipes ativos em um instante da timeline"""

    active_video: Optional[Clip] = None
    active_text: tuple[Clip, ...] = ()
    active_audio: tuple[Clip, ...] = ()
    active_video_by_track: dict[str, Clip] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.active_video is None and not self.active_text and not self.active_audio


def clips_at(clips: Iterable[Clip], time: float) -> list[Clip]:
    """Retorna os clipes cujo intervalo [start, end) contém o instante"""
    return [clip for clip in clips if clip.contains(time)]


def visible_clips_at(clips: Sequence[Clip], time: float) -> VisibleClips:
    """Calcula o que o preview deve mostrar no instante

    No máximo um vídeo por track: se a invariante de não-sobreposição foi
    violada (ex.: update manual), vence o primeiro na ordem de inserção.
    Textos seguem a ordem de inserção para manter o z-order estável.
    """
    by_track: dict[str, Clip] = {}
    texts = []
    audios = []

    for clip in clips_at(clips, time):
        if clip.kind == "video":
            by_track.setdefault(clip.track, clip)
        elif clip.kind == "text":
            texts.append(clip)
        else:
            audios.append(clip)

    active_video = next(iter(by_track.values()), None)
    return VisibleClips(
        active_video=active_video,
        active_text=tuple(texts),
        active_audio=tuple(audios),
        active_video_by_track=by_track,
    )


def total_duration(clips: Iterable[Clip], minimum: float = 0.0) -> float:
    """Duração total da timeline (maior fim), com piso mínimo"""
    return max([minimum, *(clip.end for clip in clips)])


def intervals_overlap(a: Clip, b: Clip) -> bool:
    """Verifica se dois clipes da mesma track se sobrepõem"""
    return a.track == b.track and a.start < b.end and b.start < a.end


def find_overlaps(clips: Iterable[Clip]) -> list[tuple[Clip, Clip]]:
    """Lista os pares de clipes sobrepostos na mesma track"""
    return [(a, b) for a, b in combinations(list(clips), 2) if intervals_overlap(a, b)]
