# -*- coding: utf-8 -*-
"""
Serviço de edição: fronteira entre a interface e a engine de timeline
"""

from typing import Callable, Iterable, Optional

from ...domain.errors import EmptyTimelineExportError
from ...domain.models.clip import Clip
from ...domain.models.plan import ExportPlan
from ...domain.visibility import VisibleClips, visible_clips_at
from ...infra.logging import get_logger
from ...infra.settings import AppSettings, load_settings
from ...rendering.export_driver import ExportDriver
from ...rendering.graph_builder import GraphBuilder
from ...rendering.runner import CancelToken
from .playhead import Playhead
from .timeline_store import SplitResult, TimelineStore


class EditorService:
    """Expõe as operações de edição, preview e exportação"""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        store: Optional[TimelineStore] = None,
        playhead: Optional[Playhead] = None,
        graph_builder: Optional[GraphBuilder] = None,
        export_driver: Optional[ExportDriver] = None,
    ):
        self.logger = get_logger("EditorService")
        self.settings = settings or load_settings()
        self.store = store or TimelineStore()
        self.playhead = playhead or Playhead()
        self.graph_builder = graph_builder or GraphBuilder(self.settings)
        self.export_driver = export_driver or ExportDriver(self.settings)

    # Edição

    def add_clip(self, clip: Clip) -> Clip:
        return self.store.add(clip)

    def update_clip(self, clip: Clip) -> None:
        self.store.update(clip)

    def delete_clip(self, clip_id: str) -> None:
        self.store.delete(clip_id)

    def split_clip(self, clip_id: str, at_time: float) -> SplitResult:
        return self.store.split(clip_id, at_time)

    def split_at_playhead(self, clip_id: str) -> SplitResult:
        """Corta o clipe na posição atual do playhead"""
        return self.store.split(clip_id, self.playhead.position)

    # Preview

    @property
    def total_duration(self) -> float:
        return self.store.total_duration()

    def visible_clips_at(self, time_s: Optional[float] = None) -> VisibleClips:
        """Clipes ativos no instante (padrão: posição do playhead)"""
        if time_s is None:
            time_s = self.playhead.position
        return visible_clips_at(self.store.clips, time_s)

    async def play(self) -> None:
        await self.playhead.play(self.total_duration)

    def pause(self) -> None:
        self.playhead.pause()

    # Exportação

    def build_export_plan(self, clips: Optional[Iterable[Clip]] = None) -> ExportPlan:
        return self.graph_builder.build(self.store.clips if clips is None else clips)

    async def run_export(
        self,
        plan: ExportPlan,
        on_progress: Optional[Callable[[float], None]] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> bytes:
        return await self.export_driver.run(plan, on_progress, cancel_token)

    async def export(
        self,
        on_progress: Optional[Callable[[float], None]] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> bytes:
        """Exporta a timeline atual; rejeita timeline vazia antes de chamar a engine"""
        if len(self.store) == 0:
            raise EmptyTimelineExportError()

        plan = self.build_export_plan()
        for skipped in plan.skipped:
            self.logger.warning("Clipe %s não será exportado (%s)", skipped.clip_id, skipped.reason)
        return await self.run_export(plan, on_progress, cancel_token)
