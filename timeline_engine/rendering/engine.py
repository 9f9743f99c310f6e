# -*- coding: utf-8 -*-
"""
Engine de codificação: binário do FFmpeg + armazenamento de trabalho privado

Cada exportação adquire a sua própria instância e a libera ao final,
com limpeza garantida tanto em sucesso quanto em falha.
"""

import asyncio
import shutil
import tempfile
from pathlib import Path
from typing import Callable, List, Optional

from ..domain.errors import EngineFailureError
from ..infra.logging import get_logger
from ..infra.paths import ffmpeg_bin
from .runner import CancelToken, Progress, Runner


class FFmpegEngine:
    """Instância de engine com escopo de uma exportação"""

    def __init__(self, settings=None, runner: Optional[Runner] = None):
        self.logger = get_logger("FFmpegEngine")
        self.settings = settings
        self.runner = runner or Runner()
        self.binary: Optional[str] = None
        self._workdir: Optional[Path] = None

    @property
    def loaded(self) -> bool:
        return self._workdir is not None

    @property
    def workdir(self) -> Path:
        if self._workdir is None:
            raise EngineFailureError("Engine não carregada")
        return self._workdir

    async def load(self) -> "FFmpegEngine":
        """Resolve o binário e cria o diretório de trabalho"""
        if self.loaded:
            return self
        self.binary = ffmpeg_bin(self.settings)
        self._workdir = Path(await asyncio.to_thread(tempfile.mkdtemp, prefix="timeline_export_"))
        self.logger.info("Engine carregada (%s), diretório de trabalho %s", self.binary, self._workdir)
        return self

    def path(self, name: str) -> Path:
        return self.workdir / name

    async def write_file(self, name: str, data: bytes) -> Path:
        """Grava um arquivo no armazenamento de trabalho"""
        target = self.path(name)
        await asyncio.to_thread(target.write_bytes, data)
        self.logger.debug("Arquivo %s gravado (%d bytes)", name, len(data))
        return target

    async def read_file(self, name: str) -> bytes:
        target = self.path(name)
        if not target.exists():
            raise EngineFailureError(f"Saída {name} não foi gerada pelo FFmpeg")
        return await asyncio.to_thread(target.read_bytes)

    async def exec(
        self,
        cmd: List[str],
        on_progress: Optional[Callable[[Progress], None]] = None,
        duration: Optional[float] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> str:
        """Executa um comando montado pelo CliBuilder para esta engine"""
        timeout = getattr(self.settings, "encode_timeout", None)
        return await self.runner.run(
            cmd,
            on_progress=on_progress,
            duration=duration,
            timeout=timeout,
            cancel_token=cancel_token,
        )

    async def close(self):
        """Remove o armazenamento de trabalho (estado parcial incluso)"""
        if self._workdir is None:
            return
        workdir, self._workdir = self._workdir, None
        await asyncio.to_thread(shutil.rmtree, workdir, True)
        self.logger.debug("Diretório de trabalho %s removido", workdir)

    async def __aenter__(self) -> "FFmpegEngine":
        return await self.load()

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
