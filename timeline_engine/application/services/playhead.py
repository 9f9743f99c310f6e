# -*- coding: utf-8 -*-
"""
Modelo do playhead: cursor de tempo e loop cooperativo de reprodução
"""

import asyncio
import time
from typing import Awaitable, Callable, List, Optional

from ...infra.logging import get_logger

PlayheadListener = Callable[[float], None]


class Playhead:
    """Cursor de tempo do preview

    O loop de reprodução deriva a posição do relógio de parede (não de uma
    contagem de ticks), então a posição exibida não depende do frame rate.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        frame_interval: float = 1 / 60,
    ):
        self.logger = get_logger("Playhead")
        self._clock = clock
        self._sleep = sleep
        self.frame_interval = frame_interval
        self._position = 0.0
        self._playing = False
        self._run_id = 0
        self._listeners: List[PlayheadListener] = []

    @property
    def position(self) -> float:
        return self._position

    @property
    def playing(self) -> bool:
        return self._playing

    def subscribe(self, listener: PlayheadListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def seek(self, time_s: float, total_duration: Optional[float] = None) -> float:
        """Move o cursor, limitado a [0, total_duration]"""
        position = max(0.0, time_s)
        if total_duration is not None:
            position = min(position, total_duration)
        self._set(position)
        return position

    def pause(self):
        """Interrompe o loop na próxima iteração"""
        self._playing = False
        self._run_id += 1

    async def play(self, total_duration: float) -> None:
        """Avança o cursor até o fim da timeline ou até pause()

        Ao ultrapassar a duração total, o cursor volta a 0 e o loop termina.
        """
        if self._playing:
            return
        if total_duration <= 0:
            self._set(0.0)
            return

        self._playing = True
        self._run_id += 1
        run_id = self._run_id
        started_at = self._clock()
        origin = self._position
        self.logger.debug("Reprodução iniciada em %.3fs (total %.3fs)", origin, total_duration)

        # Um loop antigo que acorda depois de pause() + play() encerra sem escrever
        while self._playing and run_id == self._run_id:
            position = origin + (self._clock() - started_at)
            if position >= total_duration:
                self._playing = False
                self._set(0.0)
                self.logger.debug("Fim da timeline, playhead reiniciado")
                break
            self._set(position)
            await self._sleep(self.frame_interval)

    def _set(self, position: float):
        self._position = position
        for listener in list(self._listeners):
            listener(position)
