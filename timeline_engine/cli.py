# -*- coding: utf-8 -*-
"""
cli.py - Exporta uma timeline descrita em JSON

Uso:
    timeline-export timeline.json --output video.mp4
    timeline-export timeline.json --plan-only
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .application.services.editor_service import EditorService
from .application.services.timeline_store import TimelineStore
from .domain.errors import TimelineError
from .domain.models.clip import Clip
from .infra.logging import get_logger, setup_logging
from .infra.media_io import MediaIO
from .infra.settings import load_settings
from .rendering.filtergraph import compile_plan


def load_timeline(path: Path, media_io: MediaIO) -> List[Clip]:
    """Lê os clipes do arquivo; vídeos/áudios sem duração são medidos com ffprobe"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    items = data.get("clips", []) if isinstance(data, dict) else data

    clips = []
    for raw in items:
        raw = dict(raw)
        kind = raw.get("kind", raw.get("type"))
        source = raw.get("source", raw.get("src"))
        if "duration" not in raw and kind in ("video", "audio") and source:
            info = media_io.probe(Path(source))
            raw["duration"] = info.duration
            if kind == "video":
                raw.setdefault("has_audio", info.has_audio)
        clips.append(Clip.from_dict(raw))
    return clips


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Exporta uma timeline (JSON) para MP4 usando FFmpeg."
    )
    parser.add_argument("timeline", help="Arquivo JSON com a lista de clipes")
    parser.add_argument("--output", "-o", default="output.mp4", help="Arquivo de saída do vídeo")
    parser.add_argument("--config", default="config.json", help="Arquivo de configuração opcional")
    parser.add_argument(
        "--plan-only",
        action="store_true",
        help="Apenas imprime o filtergraph, sem codificar",
    )
    parser.add_argument("--log-file", default="timeline_engine.log", help="Arquivo de log")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Nível de log",
    )
    args = parser.parse_args(argv)

    setup_logging(args.log_file, getattr(logging, args.log_level))
    logger = get_logger("cli")
    settings = load_settings(args.config)

    try:
        clips = load_timeline(Path(args.timeline), MediaIO(settings))
        service = EditorService(settings=settings, store=TimelineStore(clips))

        if args.plan_only:
            plan = service.build_export_plan()
            print(compile_plan(plan).to_string())
            return 0

        def on_progress(value: float):
            print(f"\rExportando... {value * 100:5.1f}%", end="", flush=True)

        data = asyncio.run(service.export(on_progress))
        print()
        Path(args.output).write_bytes(data)
        print(f"Vídeo gerado com sucesso: {args.output}")
        return 0
    except TimelineError as e:
        logger.error("Falha na exportação: %s", e)
        print(f"\nErro [{e.code}]: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
