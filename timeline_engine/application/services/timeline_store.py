# -*- coding: utf-8 -*-
"""
Repositório explícito da timeline

Mantém a coleção ordenada de clipes de todas as tracks e garante que
add/split nunca produzam sobreposição na mesma track. Interfaces de
usuário acompanham as mudanças via subscribe().
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Literal, Optional, Tuple

from ...domain.errors import InvalidSplitPointError, TimelineBusyError, UnknownClipIdError
from ...domain.models.clip import Clip, new_clip_id
from ...domain.visibility import total_duration
from ...infra.logging import get_logger

TimelineAction = Literal["added", "updated", "deleted", "split"]


@dataclass(frozen=True)
class TimelineEvent:
    """Notificação enviada aos observadores após cada mutação"""

    action: TimelineAction
    clips: Tuple[Clip, ...] = ()
    removed_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SplitResult:
    """Resultado de um corte: as duas partes que substituem o original"""

    part1: Clip
    part2: Clip


TimelineListener = Callable[[TimelineEvent], None]


class TimelineStore:
    """Dono exclusivo dos clipes da timeline"""

    def __init__(self, clips: Optional[Iterable[Clip]] = None):
        self.logger = get_logger("TimelineStore")
        # Carrega um snapshot como está, sem realocação
        self._clips: List[Clip] = list(clips or [])
        self._listeners: List[TimelineListener] = []
        self._guard = threading.Lock()

    # Leitura

    @property
    def clips(self) -> Tuple[Clip, ...]:
        """Snapshot dos clipes em ordem de inserção"""
        return tuple(self._clips)

    def __len__(self) -> int:
        return len(self._clips)

    def __iter__(self) -> Iterator[Clip]:
        return iter(self.clips)

    def __contains__(self, clip_id: object) -> bool:
        return self.find(clip_id) is not None

    def find(self, clip_id) -> Optional[Clip]:
        return next((c for c in self._clips if c.id == clip_id), None)

    def get(self, clip_id: str) -> Clip:
        clip = self.find(clip_id)
        if clip is None:
            raise UnknownClipIdError(clip_id)
        return clip

    def track_clips(self, track: str) -> List[Clip]:
        """Clipes de uma track ordenados pelo início"""
        return sorted((c for c in self._clips if c.track == track), key=lambda c: c.start)

    def total_duration(self, minimum: float = 0.0) -> float:
        return total_duration(self._clips, minimum)

    # Observadores

    def subscribe(self, listener: TimelineListener) -> Callable[[], None]:
        """Registra um observador; retorna a função para cancelar a inscrição"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: TimelineEvent):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                self.logger.exception("Observador falhou ao processar evento %s", event.action)

    @contextmanager
    def _mutation(self):
        # Guarda não reentrante: nenhuma operação pode intercalar com outra
        if not self._guard.acquire(blocking=False):
            raise TimelineBusyError()
        try:
            yield
        finally:
            self._guard.release()

    # Mutações

    def add(self, clip: Clip) -> Clip:
        """Adiciona um clipe, realocando-o para a primeira posição livre

        Varre os clipes da track em ordem de início com um cursor a partir
        de 0: para no primeiro intervalo onde o clipe cabe, senão avança o
        cursor para o fim do clipe existente. Nunca falha.
        """
        with self._mutation():
            cursor = 0.0
            for existing in self.track_clips(clip.track):
                if cursor + clip.duration <= existing.start:
                    break
                cursor = existing.end

            final = clip if cursor == clip.start else clip.with_changes(start=cursor)
            self._clips.append(final)

        if final.start != clip.start:
            self.logger.debug(
                "Clipe %s realocado de %.3fs para %.3fs na track %s",
                final.id, clip.start, final.start, final.track,
            )
        self.logger.info("Clipe %s adicionado (%s, %.3fs..%.3fs)", final.id, final.kind, final.start, final.end)
        self._notify(TimelineEvent("added", (final,)))
        return final

    def update(self, clip: Clip) -> None:
        """Substitui o clipe de mesmo id

        Não revalida sobreposição: quem chama (ex.: arrastar na timeline)
        é responsável por respeitar os limites.
        """
        with self._mutation():
            index = self._index_of(clip.id)
            self._clips[index] = clip

        self.logger.debug("Clipe %s atualizado", clip.id)
        self._notify(TimelineEvent("updated", (clip,)))

    def delete(self, clip_id: str) -> None:
        """Remove o clipe; não faz nada se o id não existir"""
        with self._mutation():
            before = len(self._clips)
            self._clips = [c for c in self._clips if c.id != clip_id]
            removed = len(self._clips) != before

        if removed:
            self.logger.info("Clipe %s removido", clip_id)
            self._notify(TimelineEvent("deleted", removed_ids=(clip_id,)))

    def split(self, clip_id: str, at_time: float) -> SplitResult:
        """Corta o clipe em dois no instante, que deve ser estritamente interno"""
        with self._mutation():
            index = self._index_of(clip_id)
            original = self._clips[index]
            if at_time <= original.start or at_time >= original.end:
                raise InvalidSplitPointError(clip_id, at_time, original.start, original.end)

            offset = at_time - original.start
            part1 = original.with_changes(duration=offset)
            part2 = original.with_changes(
                id=new_clip_id(original.kind),
                start=at_time,
                duration=original.end - at_time,
                # A segunda parte continua a mídia de onde a primeira parou
                source_in=original.source_in + offset if original.kind != "text" else original.source_in,
            )
            self._clips[index:index + 1] = [part1, part2]

        self.logger.info("Clipe %s cortado em %.3fs (nova parte %s)", clip_id, at_time, part2.id)
        self._notify(TimelineEvent("split", (part1, part2)))
        return SplitResult(part1, part2)

    def _index_of(self, clip_id: str) -> int:
        for i, clip in enumerate(self._clips):
            if clip.id == clip_id:
                return i
        raise UnknownClipIdError(clip_id)
