# -*- coding: utf-8 -*-
"""
Testes de integração para construção do plano e do filtergraph
"""

import tempfile
from pathlib import Path

import pytest

from timeline_engine.domain.models.clip import Clip
from timeline_engine.domain.models.plan import (
    AudioMix,
    BaseCanvas,
    DelayedAudio,
    ExportPlan,
    TimedOverlay,
    TimedText,
)
from timeline_engine.infra.plugins import plugin_registry
from timeline_engine.rendering.cli_builder import CliBuilder
from timeline_engine.rendering.filtergraph import FilterGraph, compile_plan
from timeline_engine.rendering.graph_builder import GraphBuilder


@pytest.fixture
def scenario(make_clip):
    """Vídeo 0-5s, música 0-10s e texto 1-3s"""
    return [
        make_clip("video", start=0, duration=5, id="v1"),
        make_clip("audio", start=0, duration=10, id="a1"),
        make_clip("text", start=1, duration=2, id="t1"),
    ]


def test_graph_builder_empty_timeline(settings):
    """Testa plano de timeline vazia: só o canvas, sem áudio"""
    plan = GraphBuilder(settings).build([])

    assert plan.is_empty
    assert plan.inputs == ()
    assert plan.duration == settings.min_duration
    assert plan.outputs == {"video": "base"}
    assert compile_plan(plan).to_string() == "color=c=black:s=1080x1920:r=30:d=1[base]"


def test_graph_builder_end_to_end(settings, scenario):
    """Testa o plano completo de uma timeline com vídeo, texto e música"""
    plan = GraphBuilder(settings).build(scenario)

    assert plan.canvas.duration == 10
    assert [i.clip_id for i in plan.inputs] == ["v1", "a1"]
    assert plan.inputs[0].filename == "000_v1-clip.mp4"

    overlay, text = plan.visual_chain
    assert isinstance(overlay, TimedOverlay)
    assert (overlay.input_label, overlay.label) == ("base", "v0")
    assert (overlay.start, overlay.end) == (0, 5)
    assert isinstance(text, TimedText)
    assert (text.input_label, text.label) == ("v0", "t0")
    assert (text.start, text.end) == (1, 3)
    assert text.font_file == "Inter-Regular.ttf"

    (audio,) = plan.audio_streams
    assert (audio.input_index, audio.delay, audio.duration) == (1, 0, 10)
    assert plan.audio_mix == AudioMix(inputs=("a0",))
    assert plan.outputs == {"video": "t0", "audio": "aout"}


def test_compile_end_to_end(settings, scenario):
    """Testa a serialização do plano no filtergraph FFmpeg"""
    graph = compile_plan(GraphBuilder(settings).build(scenario))

    assert graph.filters == [
        "color=c=black:s=1080x1920:r=30:d=10[base]",
        "[0:v]trim=start=0:duration=5,setpts=PTS-STARTPTS+0/TB,"
        "scale=1080:1920:force_original_aspect_ratio=decrease[v0src]",
        "[base][v0src]overlay=x=(W-w)/2:y=(H-h)/2:eof_action=pass:enable='gte(t,0)*lt(t,5)'[v0]",
        "[v0]drawtext=text='Hello':font='Inter':fontsize=48:fontcolor=#FFFFFF:"
        "x=0.5*w-text_w*0.5:y=0.5*h-text_h/2:enable='gte(t,1)*lt(t,3)'[t0]",
        "[1:a]atrim=start=0:duration=10,asetpts=PTS-STARTPTS,volume=1,adelay=0:all=1[a0]",
        "[a0]amix=inputs=1:duration=longest:normalize=0[aout]",
    ]
    assert graph.outputs == {"video": "t0", "audio": "aout"}


def test_graph_is_linear_in_clip_count(settings, make_clip):
    """Testa que cada clipe gera no máximo um nó"""
    clips = [make_clip("video", start=i * 2, duration=2) for i in range(4)]
    clips += [make_clip("text", start=i, duration=1, track="text") for i in range(3)]
    clips += [make_clip("audio", start=i * 3, duration=3) for i in range(2)]

    plan = GraphBuilder(settings).build(clips)

    assert len(plan.visual_chain) == 4 + 3
    assert len(plan.audio_streams) == 2
    # canvas + um nó por clipe + mixagem
    assert len(plan.nodes) == 1 + 9 + 1


def test_no_audio_means_no_audio_output(settings, make_clip):
    """Testa que sem áudio não há mixagem nem saída de áudio"""
    plan = GraphBuilder(settings).build([make_clip("video", start=0, duration=3)])

    assert plan.audio_mix is None
    assert "audio" not in plan.outputs
    assert "amix" not in compile_plan(plan).to_string()


def test_video_with_audio_is_mixed(settings, make_clip):
    """Testa que o áudio de um vídeo entra na mixagem usando a mesma entrada"""
    plan = GraphBuilder(settings).build([make_clip("video", start=2, duration=3, has_audio=True)])

    assert len(plan.inputs) == 1
    (audio,) = plan.audio_streams
    assert audio.input_index == 0
    assert audio.delay == 2
    assert "adelay=2000:all=1" in compile_plan(plan).to_string()


def test_video_chain_ordered_by_track_then_start(settings, make_clip):
    """Testa a ordem dos overlays: tracks na ordem configurada, depois início"""
    late = make_clip("video", start=5, duration=2, id="late")
    broll = make_clip("video", start=0, duration=2, id="broll", track="video2")
    early = make_clip("video", start=0, duration=2, id="early")

    plan = GraphBuilder(settings).build([late, broll, early])

    assert [n.clip_id for n in plan.visual_chain] == ["early", "late", "broll"]


def test_split_clip_keeps_media_offset(settings, make_clip):
    """Testa que o ponto de entrada da mídia chega ao filtro de corte"""
    clip = make_clip("video", start=4, duration=3, source_in=2.5)

    graph = compile_plan(GraphBuilder(settings).build([clip]))

    assert "[0:v]trim=start=2.5:duration=3,setpts=PTS-STARTPTS+4/TB" in graph.to_string()


def test_skipped_clips(settings, make_clip):
    """Testa que clipes sem mídia ou com estilo incompleto são ignorados"""
    no_source = make_clip("video", source=None, id="sem-midia")
    no_style = make_clip("text", color=None, id="sem-estilo")
    ok = make_clip("audio", id="ok")

    plan = GraphBuilder(settings).build([no_source, no_style, ok])

    assert [(s.clip_id, s.reason) for s in plan.skipped] == [
        ("sem-midia", "MISSING_SOURCE"),
        ("sem-estilo", "INCOMPLETE_TEXT_STYLE"),
    ]
    assert plan.visual_chain == ()
    assert [i.clip_id for i in plan.inputs] == ["ok"]


def test_every_node_type_has_a_filter():
    """Testa que todos os nós da IR possuem filtro registrado"""
    compile_plan(ExportPlan(canvas=BaseCanvas(width=2, height=2, duration=1)))

    for node_type in (BaseCanvas, TimedOverlay, TimedText, DelayedAudio, AudioMix):
        assert plugin_registry.get_filter(node_type) is not None
        assert plugin_registry.get_descriptor(node_type).node_type is node_type

    names = {descriptor.name for descriptor in plugin_registry.list_filters()}
    assert {"canvas", "overlay", "drawtext", "adelay", "amix"} <= names


def test_filter_graph_string_conversion():
    """Testa conversão de FilterGraph para string"""
    graph = FilterGraph()
    graph.add_filter("[0:v]scale=1920:1080[v0]")
    graph.add_filter("[v0]format=yuv420p[out]")

    assert graph.to_string() == "[0:v]scale=1920:1080[v0];[v0]format=yuv420p[out]"


def test_cli_builder_basic(settings, scenario):
    """Testa construção de comando FFmpeg básico"""
    graph = compile_plan(GraphBuilder(settings).build(scenario))
    builder = CliBuilder()

    with tempfile.NamedTemporaryFile(suffix=".mp4", delete=False) as tmp:
        output_path = Path(tmp.name)

    try:
        cmd = builder.make_command(graph, output_path, settings.render_settings(), duration=10)

        assert cmd[0] == "ffmpeg"
        assert cmd[cmd.index("-filter_complex") + 1] == graph.to_string()
        assert ["-i", "000_v1-clip.mp4"] == cmd[cmd.index("000_v1-clip.mp4") - 1:cmd.index("000_v1-clip.mp4") + 1]
        maps = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-map"]
        assert maps == ["[t0]", "[aout]"]
        assert "libx264" in cmd
        assert "aac" in cmd
        assert cmd[cmd.index("-t") + 1] == "10"
        assert cmd[-1] == str(output_path)
    finally:
        output_path.unlink(missing_ok=True)


def test_cli_builder_empty_plan(settings):
    """Testa comando de timeline vazia: mapeia o canvas e não tem áudio"""
    graph = compile_plan(GraphBuilder(settings).build([]))

    cmd = CliBuilder().make_command(graph, Path("out.mp4"), settings.render_settings())

    assert "-i" not in cmd
    assert cmd[cmd.index("-map") + 1] == "[base]"
    assert "-c:a" not in cmd


def test_cli_builder_still_image_loops(settings, make_clip):
    """Testa que imagens estáticas são repetidas pela duração do clipe"""
    logo = make_clip("video", start=0, duration=4, source="logo.png", name="logo.png")
    graph = compile_plan(GraphBuilder(settings).build([logo]))

    cmd = CliBuilder().make_command(
        graph,
        Path("out.mp4"),
        settings.render_settings(),
        input_paths={0: Path("/work/logo.png")},
    )

    i = cmd.index("-loop")
    assert cmd[i:i + 6] == ["-loop", "1", "-t", "4", "-i", str(Path("/work/logo.png"))]


def test_long_named_still_image_keeps_extension(settings):
    """Testa que a extensão da imagem sobrevive ao truncamento do nome"""
    photo = Clip(
        kind="video",
        track="video",
        start=0,
        duration=3,
        name="fotos_das_ferias_de_verao_na_praia_2024.png",
        source="/tmp/fotos_das_ferias_de_verao_na_praia_2024.png",
    )
    plan = GraphBuilder(settings).build([photo])
    (media_input,) = plan.inputs

    assert media_input.filename.startswith(f"000_{photo.id}-")
    assert media_input.filename.endswith(".png")
    assert media_input.still_image

    cmd = CliBuilder().make_command(compile_plan(plan), Path("out.mp4"), settings.render_settings())

    i = cmd.index("-loop")
    assert cmd[i:i + 6] == ["-loop", "1", "-t", "3", "-i", media_input.filename]


def test_data_uri_input_gets_extension_from_mime(settings, make_clip):
    """Testa extensão de mídia enviada como data URI"""
    upload = make_clip("video", source="data:image/png;base64,AAAA", name="")

    (media_input,) = GraphBuilder(settings).build([upload]).inputs

    assert media_input.filename == f"000_{upload.id}.png"
    assert media_input.still_image


def test_cli_builder_nvenc(settings):
    """Testa parâmetros de codificação por hardware"""
    render_settings = settings.model_copy(update={"vcodec": "h264_nvenc", "hwaccel": "cuda"}).render_settings()
    graph = compile_plan(GraphBuilder(settings).build([]))

    cmd = CliBuilder().make_command(graph, Path("out.mp4"), render_settings)

    assert cmd[cmd.index("-hwaccel") + 1] == "cuda"
    assert "constqp" in cmd
