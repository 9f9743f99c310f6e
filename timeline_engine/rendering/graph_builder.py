# -*- coding: utf-8 -*-
"""
Construção do plano de exportação (IR) a partir da timeline
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from ..domain.errors import IncompleteTextStyleError, MissingSourceError
from ..domain.models.clip import DEFAULT_TRACKS, Clip
from ..domain.models.plan import (
    AudioMix,
    BaseCanvas,
    DelayedAudio,
    ExportPlan,
    MediaInput,
    SkippedClip,
    TimedOverlay,
    TimedText,
)
from ..domain.visibility import total_duration
from ..infra.logging import get_logger
from ..infra.media_io import input_filename, is_still_image
from ..infra.settings import AppSettings


class GraphBuilder:
    """Constrói o ExportPlan a partir dos clipes da timeline

    Cada clipe vira no máximo um nó com janela de tempo (overlay, texto ou
    áudio atrasado), então o grafo cresce linearmente com a timeline.
    Lacunas entre clipes deixam passar a camada anterior.
    """

    def __init__(self, settings: Optional[AppSettings] = None, track_order: Sequence[str] = DEFAULT_TRACKS):
        self.logger = get_logger("GraphBuilder")
        self.settings = settings or AppSettings()
        self.track_order = tuple(track_order)

    def build(self, clips: Iterable[Clip]) -> ExportPlan:
        """Constrói o plano para os clipes informados"""
        clips = list(clips)
        self.logger.info("Construindo plano de exportação para %d clipes", len(clips))

        canvas = BaseCanvas(
            width=self.settings.canvas_width,
            height=self.settings.canvas_height,
            duration=total_duration(clips, self.settings.min_duration),
            frame_rate=self.settings.frame_rate,
        )

        skipped: List[SkippedClip] = []
        video_clips = self._ordered([c for c in clips if c.kind == "video"])
        audio_clips = self._ordered([c for c in clips if c.carries_audio])
        text_clips = [c for c in clips if c.kind == "text"]

        # Entradas: vídeos primeiro (ordem da cadeia), depois áudios puros
        inputs: List[MediaInput] = []
        input_by_clip = {}
        for clip in [*video_clips, *(c for c in audio_clips if c.kind == "audio")]:
            if not clip.source:
                self.logger.warning("Clipe %s (%s) sem mídia de origem, ignorado", clip.id, clip.kind)
                skipped.append(SkippedClip(clip.id, MissingSourceError.code))
                continue
            media_input = MediaInput(
                index=len(inputs),
                clip_id=clip.id,
                source=clip.source,
                filename=input_filename(len(inputs), clip.id, clip.name, clip.source),
                still_image=is_still_image(clip.source),
                duration=clip.source_in + clip.duration,
            )
            inputs.append(media_input)
            input_by_clip[clip.id] = media_input

        chain, last_label = self._build_overlays(video_clips, input_by_clip, canvas.label)
        texts, last_label = self._build_texts(text_clips, last_label, skipped)
        chain.extend(texts)

        audio_streams = self._build_audio(audio_clips, input_by_clip)
        audio_mix = AudioMix(inputs=tuple(s.label for s in audio_streams)) if audio_streams else None

        plan = ExportPlan(
            canvas=canvas,
            inputs=tuple(inputs),
            visual_chain=tuple(chain),
            audio_streams=tuple(audio_streams),
            audio_mix=audio_mix,
            skipped=tuple(skipped),
        )
        self.logger.debug(
            "Plano construído: %d entradas, %d nós visuais, %d streams de áudio, %d ignorados",
            len(plan.inputs), len(plan.visual_chain), len(plan.audio_streams), len(plan.skipped),
        )
        return plan

    def _ordered(self, clips: List[Clip]) -> List[Clip]:
        """Ordena por track (ordem configurada, depois nome) e início"""
        def key(clip: Clip) -> Tuple[int, str, float]:
            if clip.track in self.track_order:
                return (self.track_order.index(clip.track), "", clip.start)
            return (len(self.track_order), clip.track, clip.start)

        return sorted(clips, key=key)

    def _build_overlays(self, video_clips, input_by_clip, base_label) -> Tuple[list, str]:
        chain = []
        last_label = base_label
        for clip in video_clips:
            media_input = input_by_clip.get(clip.id)
            if media_input is None:
                continue
            label = f"v{len(chain)}"
            chain.append(
                TimedOverlay(
                    label=label,
                    input_label=last_label,
                    input_index=media_input.index,
                    clip_id=clip.id,
                    start=clip.start,
                    end=clip.end,
                    source_in=clip.source_in,
                )
            )
            last_label = label
        return chain, last_label

    def _build_texts(self, text_clips, last_label, skipped) -> Tuple[list, str]:
        texts = []
        for clip in text_clips:
            if not clip.has_text_style():
                self.logger.warning("Clipe de texto %s com estilo incompleto, ignorado", clip.id)
                skipped.append(SkippedClip(clip.id, IncompleteTextStyleError.code))
                continue
            label = f"t{len(texts)}"
            x, y = clip.position
            texts.append(
                TimedText(
                    label=label,
                    input_label=last_label,
                    clip_id=clip.id,
                    text=clip.text,
                    font_family=clip.font_family,
                    font_file=self.settings.font_file_for(clip.font_family),
                    font_size=clip.font_size,
                    color=clip.color,
                    x=x,
                    y=y,
                    start=clip.start,
                    end=clip.end,
                    align=clip.align,
                    shadow=clip.shadow,
                    outline=clip.outline,
                )
            )
            last_label = label
        return texts, last_label

    def _build_audio(self, audio_clips, input_by_clip) -> List[DelayedAudio]:
        streams = []
        for clip in audio_clips:
            media_input = input_by_clip.get(clip.id)
            if media_input is None:
                continue
            streams.append(
                DelayedAudio(
                    label=f"a{len(streams)}",
                    input_index=media_input.index,
                    clip_id=clip.id,
                    delay=clip.start,
                    duration=clip.duration,
                    source_in=clip.source_in,
                    volume=clip.gain,
                )
            )
        return streams
