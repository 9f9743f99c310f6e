# -*- coding: utf-8 -*-
"""
Driver de exportação: executa um ExportPlan no FFmpeg e reporta progresso

Estados: IDLE -> PREPARING -> ENCODING -> DONE | FAILED | CANCELLED.
Só existe uma exportação em andamento por driver, pois o armazenamento
de trabalho da engine não pode ser compartilhado.
"""

from contextlib import asynccontextmanager
from enum import Enum
from typing import Callable, Optional

from ..domain.errors import ExportCancelledError, ExportInProgressError, MediaFetchError
from ..domain.models.plan import ExportPlan
from ..infra.logging import get_logger
from ..infra.media_io import MediaIO
from ..infra.settings import AppSettings
from .cli_builder import CliBuilder
from .engine import FFmpegEngine
from .filtergraph import compile_plan
from .runner import CancelToken, Progress

OUTPUT_NAME = "output.mp4"

# Marcos de progresso
ENGINE_LOADED = 0.05
PREPARED = 0.10
ENCODE_END = 0.99


class ExportState(str, Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ProgressReporter:
    """Repassa o progresso garantindo valores em [0, 1] e não decrescentes"""

    def __init__(self, callback: Optional[Callable[[float], None]] = None):
        self.callback = callback
        self.value = 0.0

    def report(self, value: float):
        value = min(1.0, max(self.value, value))
        self.value = value
        if self.callback:
            self.callback(value)


class ExportDriver:
    """Transforma o plano em chamadas à engine de codificação"""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        media_io: Optional[MediaIO] = None,
        cli_builder: Optional[CliBuilder] = None,
        engine_factory: Optional[Callable[[AppSettings], FFmpegEngine]] = None,
    ):
        self.logger = get_logger("ExportDriver")
        self.settings = settings or AppSettings()
        self.media_io = media_io or MediaIO(self.settings)
        self.cli_builder = cli_builder or CliBuilder()
        self.engine_factory = engine_factory or FFmpegEngine
        self.state = ExportState.IDLE
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    @asynccontextmanager
    async def _acquire_engine(self):
        # Pool de tamanho 1: pedidos concorrentes são rejeitados
        if self._in_flight:
            raise ExportInProgressError()
        self._in_flight = True
        engine = self.engine_factory(self.settings)
        try:
            await engine.load()
            yield engine
        finally:
            try:
                await engine.close()
            finally:
                self._in_flight = False

    async def run(
        self,
        plan: ExportPlan,
        on_progress: Optional[Callable[[float], None]] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> bytes:
        """Exporta o plano e retorna o arquivo MP4 gerado"""
        if self._in_flight:
            raise ExportInProgressError()

        reporter = ProgressReporter(on_progress)
        self.state = ExportState.PREPARING
        reporter.report(0.0)

        try:
            async with self._acquire_engine() as engine:
                reporter.report(ENGINE_LOADED)

                fonts_available = await self._load_fonts(engine, plan)
                input_paths = await self._write_sources(engine, plan, reporter)
                self._check_cancelled(cancel_token)
                reporter.report(PREPARED)

                self.state = ExportState.ENCODING
                graph = compile_plan(plan, fonts_available, str(engine.workdir))
                cmd = self.cli_builder.make_command(
                    graph,
                    engine.path(OUTPUT_NAME),
                    self.settings.render_settings(),
                    input_paths=input_paths,
                    duration=plan.duration,
                    ffmpeg=engine.binary or "ffmpeg",
                )

                def on_encode_progress(progress: Progress):
                    if progress.percent is not None:
                        reporter.report(PREPARED + (ENCODE_END - PREPARED) * progress.percent)

                await engine.exec(
                    cmd,
                    on_progress=on_encode_progress,
                    duration=plan.duration,
                    cancel_token=cancel_token,
                )
                data = await engine.read_file(OUTPUT_NAME)
        except ExportCancelledError:
            self.state = ExportState.CANCELLED
            self.logger.warning("Exportação cancelada")
            raise
        except Exception as e:
            self.state = ExportState.FAILED
            self.logger.error("Exportação falhou: %s", e)
            raise

        self.state = ExportState.DONE
        reporter.report(1.0)
        self.logger.info("Exportação concluída (%d bytes)", len(data))
        return data

    async def _load_fonts(self, engine: FFmpegEngine, plan: ExportPlan) -> set:
        fonts = {node.font_file for node in plan.text_nodes if node.font_file}
        available = set()
        for font_file in sorted(fonts):
            try:
                await engine.write_file(font_file, await self.media_io.load_font(font_file))
                available.add(font_file)
            except MediaFetchError as e:
                # Sem o arquivo, o drawtext usa a família instalada no sistema
                self.logger.warning("Fonte %s indisponível: %s", font_file, e)
        return available

    async def _write_sources(self, engine: FFmpegEngine, plan: ExportPlan, reporter: ProgressReporter) -> dict:
        input_paths = {}
        total = len(plan.inputs)
        for i, media_input in enumerate(plan.inputs, 1):
            data = await self.media_io.fetch(media_input.source)
            input_paths[media_input.index] = await engine.write_file(media_input.filename, data)
            reporter.report(ENGINE_LOADED + (PREPARED - ENGINE_LOADED) * i / total)
        return input_paths

    def _check_cancelled(self, cancel_token: Optional[CancelToken]):
        if cancel_token is not None and cancel_token.cancelled:
            raise ExportCancelledError()
