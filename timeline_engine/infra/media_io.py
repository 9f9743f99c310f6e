# -*- coding: utf-8 -*-
"""
Serviços de mídia/IO: leitura de fontes de mídia, fontes tipográficas e FFprobe
"""

import asyncio
import base64
import binascii
import json
import mimetypes
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

from ..domain.errors import MediaFetchError
from .logging import get_logger
from .paths import ffprobe_bin

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".tiff", ".webp", ".gif"}


def safe_filename(text: str) -> str:
    """Nome de arquivo seguro para o diretório de trabalho do encoder"""
    return re.sub(r"[^a-zA-Z0-9\-_.]", "_", text)[:50]


def media_suffix(source: str) -> str:
    """Extensão da mídia ('.png', '.mp4'...), usada pelo FFmpeg para escolher o demuxer

    Para data URIs a extensão vem do tipo MIME.
    """
    if source.startswith("data:"):
        mime = source[5:].split(",", 1)[0].split(";", 1)[0].strip().lower()
        suffix = (mimetypes.guess_extension(mime) or "") if mime else ""
    else:
        path = urlparse(source).path if "://" in source else source
        suffix = Path(path).suffix
    suffix = suffix.lower()
    return suffix if re.fullmatch(r"\.[a-z0-9]{1,8}", suffix) else ""


def input_filename(index: int, clip_id: str, name: str, source: str) -> str:
    """Nome do arquivo de entrada: índice, id e nome truncados, extensão preservada"""
    stem = Path(name).stem if name else ""
    label = f"{clip_id}-{stem}" if stem else clip_id
    return f"{index:03d}_{safe_filename(label)}{media_suffix(source)}"


def is_still_image(source: str) -> bool:
    """Verifica se a mídia é uma imagem estática (precisa de -loop 1)"""
    if source.startswith("data:"):
        return source[5:].lower().startswith("image/")
    return media_suffix(source) in IMAGE_EXTENSIONS


@dataclass(frozen=True)
class MediaInfo:
    """Informações básicas de um arquivo de mídia"""

    duration: float
    has_audio: bool
    has_video: bool
    width: Optional[int] = None
    height: Optional[int] = None


class MediaIO:
    """Serviços de entrada/saída de mídia"""

    def __init__(self, settings=None, client: Optional[httpx.AsyncClient] = None):
        self.logger = get_logger("MediaIO")
        self.settings = settings
        self._client = client

    @property
    def http_timeout(self) -> float:
        return getattr(self.settings, "http_timeout", 30.0)

    async def fetch(self, source: str) -> bytes:
        """Obtém os bytes de uma mídia (caminho, file://, data: ou http(s)://)"""
        if source.startswith("data:"):
            return self._decode_data_uri(source)

        parsed = urlparse(source)
        if parsed.scheme in ("http", "https"):
            return await self._download(source)
        if parsed.scheme == "file":
            return await self._read_local(Path(unquote(parsed.path)))
        return await self._read_local(Path(source))

    async def load_font(self, font_file: str) -> bytes:
        """Carrega um arquivo de fonte do diretório local ou da URL base"""
        font_dir = getattr(self.settings, "font_dir", None)
        if font_dir:
            candidate = Path(font_dir) / font_file
            if candidate.exists():
                return await self._read_local(candidate)

        base_url = getattr(self.settings, "font_base_url", None)
        if base_url:
            return await self._download(f"{base_url.rstrip('/')}/{font_file}")

        raise MediaFetchError(f"Fonte não encontrada: {font_file}")

    def probe(self, path: Path) -> MediaInfo:
        """Obtém duração e streams de um arquivo via ffprobe"""
        try:
            result = subprocess.run(
                [
                    ffprobe_bin(self.settings),
                    "-v",
                    "error",
                    "-show_entries",
                    "format=duration:stream=codec_type,width,height",
                    "-of",
                    "json",
                    str(path),
                ],
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise MediaFetchError(f"ffprobe falhou para {path}: {e.stderr}") from e

        data = json.loads(result.stdout)
        streams = data.get("streams", [])
        video = next((s for s in streams if s.get("codec_type") == "video"), None)
        info = MediaInfo(
            duration=float(data.get("format", {}).get("duration", 0) or 0),
            has_audio=any(s.get("codec_type") == "audio" for s in streams),
            has_video=video is not None,
            width=int(video["width"]) if video and "width" in video else None,
            height=int(video["height"]) if video and "height" in video else None,
        )
        self.logger.debug("Mídia %s: %s", path, info)
        return info

    def _decode_data_uri(self, source: str) -> bytes:
        header, _, payload = source.partition(",")
        try:
            if header.endswith(";base64"):
                return base64.b64decode(payload)
            return unquote(payload).encode("utf-8")
        except (binascii.Error, ValueError) as e:
            raise MediaFetchError(f"Data URI inválida: {e}") from e

    async def _read_local(self, path: Path) -> bytes:
        if not path.exists():
            raise MediaFetchError(f"Arquivo de mídia não encontrado: {path}")
        self.logger.debug("Lendo mídia local %s", path)
        return await asyncio.to_thread(path.read_bytes)

    async def _download(self, url: str) -> bytes:
        self.logger.info("Baixando %s", url)
        try:
            if self._client is not None:
                response = await self._client.get(url, timeout=self.http_timeout)
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await client.get(url, timeout=self.http_timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise MediaFetchError(f"Falha ao baixar {url}: {e}") from e
        return response.content
