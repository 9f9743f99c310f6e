# -*- coding: utf-8 -*-
"""
Resolução dos binários do FFmpeg
"""

import os
import shutil
from pathlib import Path
from typing import Optional

from ..domain.errors import EngineFailureError


def get_project_root() -> Path:
    """Retorna o diretório raiz do projeto"""
    return Path(__file__).resolve().parents[2]


def _resolve(exe: str, configured: Optional[str]) -> str:
    # Ordem: configuração explícita > binário embutido > PATH
    if configured:
        return configured

    exe_name = f"{exe}.exe" if os.name == "nt" else exe
    bundled = get_project_root() / "_internal" / "ffmpeg" / "bin" / exe_name
    if bundled.exists():
        return str(bundled)

    found = shutil.which(exe_name)
    if found:
        return found

    raise EngineFailureError(f"Binário {exe} não encontrado (configure TIMELINE_{exe.upper()}_PATH)")


def ffmpeg_bin(settings=None) -> str:
    """Resolve o caminho para o binário do FFmpeg"""
    return _resolve("ffmpeg", getattr(settings, "ffmpeg_path", None))


def ffprobe_bin(settings=None) -> str:
    """Resolve o caminho para o binário do FFprobe"""
    return _resolve("ffprobe", getattr(settings, "ffprobe_path", None))
