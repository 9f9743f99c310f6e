# -*- coding: utf-8 -*-
"""
Fixtures compartilhadas dos testes
"""

import pytest

from timeline_engine.domain.models.clip import AUDIO_TRACK_1, VIDEO_TRACK, Clip
from timeline_engine.infra.settings import AppSettings


@pytest.fixture
def settings():
    """Configurações padrão, sem depender de config.json ou variáveis de ambiente"""
    return AppSettings(_env_file=None)


@pytest.fixture
def make_clip():
    """Fábrica de clipes com valores padrão por tipo"""

    def _make(kind="video", start=0.0, duration=5.0, **kwargs):
        defaults = {
            "video": {"track": VIDEO_TRACK, "source": "clip.mp4", "name": "clip.mp4"},
            "audio": {"track": AUDIO_TRACK_1, "source": "music.mp3", "name": "music.mp3"},
            "text": {
                "track": VIDEO_TRACK,
                "name": "Texto",
                "text": "Hello",
                "font_family": "Inter, sans-serif",
                "font_size": 48,
                "color": "#FFFFFF",
            },
        }[kind]
        defaults.update(kwargs)
        return Clip(kind=kind, start=start, duration=duration, **defaults)

    return _make
