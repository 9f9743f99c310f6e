# -*- coding: utf-8 -*-
"""
Construção de comandos FFmpeg a partir do filtergraph
"""

from pathlib import Path
from typing import List, Mapping, Optional

from ..domain.models.filters import fmt_number
from ..domain.models.plan import RenderSettings
from ..infra.logging import get_logger
from .filtergraph import FilterGraph


class CliBuilder:
    """Constrói comandos FFmpeg a partir do filtergraph"""

    def __init__(self):
        self.logger = get_logger("CliBuilder")

    def make_command(
        self,
        graph: FilterGraph,
        out_path: Path,
        settings: RenderSettings,
        input_paths: Optional[Mapping[int, Path]] = None,
        duration: Optional[float] = None,
        ffmpeg: str = "ffmpeg",
    ) -> List[str]:
        """Gera o comando FFmpeg completo

        input_paths mapeia o índice de cada MediaInput para o arquivo no
        diretório de trabalho do encoder (padrão: o nome do arquivo).
        """
        self.logger.info("Construindo comando FFmpeg para %d inputs", len(graph.inputs))

        cmd = [ffmpeg, "-y", "-hide_banner", "-loglevel", "error"]

        # Hardware acceleration primeiro, se especificado
        if settings.hwaccel:
            cmd.extend(["-hwaccel", settings.hwaccel])

        for media_input in graph.inputs:
            path = (input_paths or {}).get(media_input.index, Path(media_input.filename))
            if media_input.still_image:
                # Para imagens, usar loop para criar vídeo
                cmd.extend(["-loop", "1", "-t", fmt_number(media_input.duration), "-i", str(path)])
            else:
                cmd.extend(["-i", str(path)])

        # Mesmo sem clipes existe o canvas base, então sempre há filtergraph
        cmd.extend(["-filter_complex", graph.to_string()])
        cmd.extend(["-map", f"[{graph.outputs['video']}]"])
        if "audio" in graph.outputs:
            cmd.extend(["-map", f"[{graph.outputs['audio']}]"])
            cmd.extend(["-c:a", settings.acodec, "-b:a", settings.audio_bitrate])

        # Configurações de codec de vídeo
        cmd.extend(["-c:v", settings.vcodec])
        if settings.vcodec in ("libx264", "libx265"):
            cmd.extend(["-preset", settings.preset, "-crf", str(settings.crf)])
        elif settings.vcodec in ("h264_nvenc", "hevc_nvenc"):
            cmd.extend(["-preset", "p5", "-rc", "constqp", "-qp", str(settings.crf)])

        # Formato de pixel e otimizações
        cmd.extend(["-pix_fmt", "yuv420p", "-movflags", "+faststart"])
        if duration is not None:
            cmd.extend(["-t", fmt_number(duration)])

        cmd.append(str(out_path))

        self.logger.debug("Comando FFmpeg: %s", " ".join(map(str, cmd)))
        return cmd
