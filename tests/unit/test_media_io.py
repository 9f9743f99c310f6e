# -*- coding: utf-8 -*-
"""
Testes unitários dos serviços de mídia
"""

import base64
import json
import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import httpx
import pytest

from timeline_engine.domain.errors import MediaFetchError
from timeline_engine.infra.media_io import (
    MediaInfo,
    MediaIO,
    input_filename,
    is_still_image,
    media_suffix,
    safe_filename,
)
from timeline_engine.infra.settings import AppSettings


def _client(routes):
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) in routes:
            return httpx.Response(200, content=routes[str(request.url)])
        return httpx.Response(404)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_safe_filename():
    """Testa nomes de arquivo seguros"""
    assert safe_filename("video-1-Minhas Férias.mp4") == "video-1-Minhas_F_rias.mp4"
    assert len(safe_filename("x" * 80)) == 50


@pytest.mark.parametrize(
    "source, expected",
    [
        ("logo.PNG", True),
        ("https://cdn.example.com/foto.jpg?v=2", True),
        ("data:image/png;base64,AAAA", True),
        ("clip.mp4", False),
        ("data:video/mp4;base64,AAAA", False),
    ],
)
def test_is_still_image(source, expected):
    assert is_still_image(source) is expected


@pytest.mark.parametrize(
    "source, expected",
    [
        ("/tmp/holiday_photo.PNG", ".png"),
        ("https://cdn.example.com/clip.mp4?token=abc", ".mp4"),
        ("data:image/png;base64,AAAA", ".png"),
        ("data:video/mp4;base64,AAAA", ".mp4"),
        ("sem_extensao", ""),
        ("data:,texto", ""),
    ],
)
def test_media_suffix(source, expected):
    assert media_suffix(source) == expected


def test_input_filename_keeps_extension():
    """Testa que o nome truncado preserva a extensão da mídia"""
    clip_id = "video-" + "f" * 32
    filename = input_filename(3, clip_id, "um_nome_de_arquivo_bem_comprido_demais.png", "/tmp/foto.png")

    assert filename.startswith(f"003_{clip_id}-um_nome")
    assert filename.endswith(".png")
    assert len(filename) == 4 + 50 + 4


@pytest.mark.asyncio
async def test_fetch_data_uri():
    """Testa decodificação de data URI"""
    payload = base64.b64encode(b"\x00\x01video").decode()

    data = await MediaIO().fetch(f"data:video/mp4;base64,{payload}")

    assert data == b"\x00\x01video"


@pytest.mark.asyncio
async def test_fetch_local_file(tmp_path):
    """Testa leitura de caminho local e URL file://"""
    media = tmp_path / "clip.mp4"
    media.write_bytes(b"conteudo")
    media_io = MediaIO()

    assert await media_io.fetch(str(media)) == b"conteudo"
    assert await media_io.fetch(media.as_uri()) == b"conteudo"


@pytest.mark.asyncio
async def test_fetch_missing_file(tmp_path):
    with pytest.raises(MediaFetchError):
        await MediaIO().fetch(str(tmp_path / "nao_existe.mp4"))


@pytest.mark.asyncio
async def test_fetch_http():
    """Testa download via httpx"""
    async with _client({"https://cdn.example.com/clip.mp4": b"remoto"}) as client:
        media_io = MediaIO(client=client)

        assert await media_io.fetch("https://cdn.example.com/clip.mp4") == b"remoto"
        with pytest.raises(MediaFetchError):
            await media_io.fetch("https://cdn.example.com/outro.mp4")


@pytest.mark.asyncio
async def test_load_font_from_dir(tmp_path):
    """Testa carregamento de fonte do diretório local"""
    (tmp_path / "Inter-Regular.ttf").write_bytes(b"ttf")
    media_io = MediaIO(AppSettings(_env_file=None, font_dir=str(tmp_path)))

    assert await media_io.load_font("Inter-Regular.ttf") == b"ttf"


@pytest.mark.asyncio
async def test_load_font_from_base_url():
    """Testa carregamento de fonte da URL base"""
    settings = AppSettings(_env_file=None, font_base_url="https://fonts.example.com/")
    async with _client({"https://fonts.example.com/Lobster-Regular.ttf": b"lobster"}) as client:
        media_io = MediaIO(settings, client=client)

        assert await media_io.load_font("Lobster-Regular.ttf") == b"lobster"


@pytest.mark.asyncio
async def test_load_font_without_source():
    """Testa fonte sem diretório nem URL configurados"""
    with pytest.raises(MediaFetchError):
        await MediaIO(AppSettings(_env_file=None)).load_font("Inter-Regular.ttf")


def test_reads_ffprobe_output():
    """Testa leitura da saída JSON do ffprobe"""
    output = json.dumps(
        {
            "format": {"duration": "12.5"},
            "streams": [
                {"codec_type": "video", "width": 1080, "height": 1920},
                {"codec_type": "audio"},
            ],
        }
    )
    settings = AppSettings(_env_file=None, ffprobe_path="ffprobe")

    with patch("timeline_engine.infra.media_io.subprocess.run", return_value=Mock(stdout=output)) as run:
        info = MediaIO(settings).probe(Path("clip.mp4"))

    assert info == MediaInfo(duration=12.5, has_audio=True, has_video=True, width=1080, height=1920)
    assert run.call_args[0][0][0] == "ffprobe"
    assert run.call_args[0][0][-1] == "clip.mp4"


def test_ffprobe_failure():
    """Testa erro do ffprobe"""
    settings = AppSettings(_env_file=None, ffprobe_path="ffprobe")
    error = subprocess.CalledProcessError(1, "ffprobe", stderr="clip.mp4: Invalid data")

    with patch("timeline_engine.infra.media_io.subprocess.run", side_effect=error):
        with pytest.raises(MediaFetchError, match="Invalid data"):
            MediaIO(settings).probe(Path("clip.mp4"))
