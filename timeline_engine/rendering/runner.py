# -*- coding: utf-8 -*-
"""
Execução assíncrona de comandos FFmpeg com progresso e cancelamento
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..domain.errors import EngineFailureError, ExportCancelledError
from ..infra.logging import get_logger


@dataclass(frozen=True)
class Progress:
    """Representa o progresso de renderização"""

    out_time_ms: int
    speed: Optional[float]
    percent: Optional[float]
    frame: Optional[int] = None
    fps: Optional[float] = None
    bitrate: Optional[str] = None
    finished: bool = False


class CancelToken:
    """Sinalizador de cancelamento de uma exportação"""

    def __init__(self):
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ProgressParser:
    """Acumula as linhas key=value de -progress pipe:1 em blocos"""

    def __init__(self, duration: Optional[float] = None):
        self.duration = duration
        self._block: Dict[str, str] = {}

    def feed(self, line: str) -> Optional[Progress]:
        """Processa uma linha; retorna Progress ao fim de cada bloco"""
        if not line or "=" not in line:
            return None

        key, value = line.split("=", 1)
        self._block[key.strip()] = value.strip()
        if key.strip() != "progress":
            return None

        block, self._block = self._block, {}
        return self._to_progress(block)

    def _to_progress(self, data: Dict[str, str]) -> Optional[Progress]:
        # out_time_us é o campo confiável; out_time_ms também vem em microssegundos
        raw = data.get("out_time_us") or data.get("out_time_ms")
        try:
            out_time_ms = max(0, int(raw)) // 1000 if raw not in (None, "N/A") else 0
        except ValueError:
            out_time_ms = 0

        finished = data.get("progress") == "end"
        percent = None
        if self.duration:
            percent = min(1.0, out_time_ms / 1000.0 / self.duration)
            if finished:
                percent = 1.0

        return Progress(
            out_time_ms=out_time_ms,
            speed=_to_float(data.get("speed", "").rstrip("x")),
            percent=percent,
            frame=_to_int(data.get("frame")),
            fps=_to_float(data.get("fps")),
            bitrate=data.get("bitrate"),
            finished=finished,
        )


class Runner:
    """Executa comandos FFmpeg com monitoramento de progresso"""

    def __init__(self, poll_interval: float = 0.25):
        self.logger = get_logger("Runner")
        self.poll_interval = poll_interval

    async def run(
        self,
        cmd: List[str],
        on_progress: Optional[Callable[[Progress], None]] = None,
        duration: Optional[float] = None,
        timeout: Optional[float] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> str:
        """Executa o comando; retorna o stderr. Falhas viram EngineFailureError"""
        cmd_with_progress = cmd[:-1] + ["-progress", "pipe:1", "-nostats", cmd[-1]]
        self.logger.info("Executando comando FFmpeg: %s", " ".join(map(str, cmd_with_progress)))

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd_with_progress,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise EngineFailureError(f"Não foi possível iniciar o FFmpeg: {e}") from e

        # stderr lido em paralelo para não travar o processo com o pipe cheio
        stderr_task = asyncio.create_task(process.stderr.read())
        parser = ProgressParser(duration)
        start_time = time.monotonic()

        try:
            while True:
                if cancel_token is not None and cancel_token.cancelled:
                    self.logger.warning("Cancelamento solicitado, terminando FFmpeg")
                    await self._terminate(process)
                    raise ExportCancelledError()

                if timeout and (time.monotonic() - start_time) > timeout:
                    self.logger.error("Timeout de %ss excedido, terminando processo", timeout)
                    await self._terminate(process)
                    raise EngineFailureError(f"Comando FFmpeg excedeu timeout de {timeout}s")

                try:
                    raw_line = await asyncio.wait_for(process.stdout.readline(), self.poll_interval)
                except asyncio.TimeoutError:
                    continue

                if not raw_line:
                    break

                progress = parser.feed(raw_line.decode("utf-8", errors="replace").strip())
                if progress and on_progress:
                    on_progress(progress)

            return_code = await process.wait()
            stderr = (await stderr_task).decode("utf-8", errors="replace")
        except BaseException:
            if not stderr_task.done():
                stderr_task.cancel()
            if process.returncode is None:
                await self._terminate(process)
            raise

        if return_code != 0:
            self.logger.error("Comando FFmpeg retornou código %d. Stderr: %s", return_code, stderr)
            raise EngineFailureError(
                f"FFmpeg falhou: {stderr.strip()}", returncode=return_code, stderr=stderr
            )

        self.logger.info("Comando FFmpeg finalizado com sucesso.")
        return stderr

    async def _terminate(self, process):
        if process.returncode is not None:
            return
        process.terminate()
        try:
            await asyncio.wait_for(process.wait(), 5)
        except asyncio.TimeoutError:
            self.logger.error("Processo não terminou graciosamente, forçando...")
            process.kill()
            await process.wait()


def _to_float(value: Optional[str]) -> Optional[float]:
    try:
        return float(value) if value not in (None, "", "N/A") else None
    except ValueError:
        return None


def _to_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value not in (None, "", "N/A") else None
    except ValueError:
        return None
