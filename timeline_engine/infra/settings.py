# -*- coding: utf-8 -*-
"""
Gerenciamento de configurações usando pydantic-settings
"""

import json
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.models.plan import RenderSettings

# Famílias de fonte oferecidas pelo editor de texto
DEFAULT_FONT_MAP: Dict[str, str] = {
    "Inter, sans-serif": "Inter-Regular.ttf",
    "Roboto, sans-serif": "Roboto-Regular.ttf",
    "Lobster, cursive": "Lobster-Regular.ttf",
    '"Courier Prime", monospace': "CourierPrime-Regular.ttf",
}


class AppSettings(BaseSettings):
    """Configurações da engine de timeline e exportação"""

    model_config = SettingsConfigDict(
        env_prefix="TIMELINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Binários externos
    ffmpeg_path: Optional[str] = None
    ffprobe_path: Optional[str] = None

    # Canvas base (vertical 9:16)
    canvas_width: int = 1080
    canvas_height: int = 1920
    frame_rate: int = 30
    min_duration: float = 1.0

    # Fontes
    font_dir: Optional[str] = None
    font_base_url: Optional[str] = None
    font_map: Dict[str, str] = dict(DEFAULT_FONT_MAP)
    default_font_family: Optional[str] = "Inter, sans-serif"

    # Codificação
    container: str = "mp4"
    vcodec: str = "libx264"
    acodec: str = "aac"
    crf: int = 23
    preset: str = "ultrafast"
    audio_bitrate: str = "192k"
    hwaccel: Optional[str] = None

    # Tempos limite (segundos); None = sem limite
    encode_timeout: Optional[float] = None
    http_timeout: float = 30.0

    def render_settings(self) -> RenderSettings:
        """Converte as configurações de codificação em RenderSettings"""
        return RenderSettings(
            container=self.container,
            vcodec=self.vcodec,
            acodec=self.acodec,
            crf=self.crf,
            preset=self.preset,
            audio_bitrate=self.audio_bitrate,
            hwaccel=self.hwaccel,
        )

    def font_file_for(self, family: Optional[str]) -> Optional[str]:
        """Resolve o arquivo de fonte de uma família, com fallback para a padrão"""
        if family and family in self.font_map:
            return self.font_map[family]
        if self.default_font_family:
            return self.font_map.get(self.default_font_family)
        return None


def load_settings(config_path: Union[str, Path] = "config.json") -> AppSettings:
    """Carrega as configurações da aplicação"""
    # Primeiro tenta carregar do config.json (compatibilidade)
    config_path = Path(config_path)
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)
        return AppSettings(**config_data)

    # Senão carrega das variáveis de ambiente ou padrões
    return AppSettings()
