# -*- coding: utf-8 -*-
"""
Hierarquia de erros da engine de timeline e da exportação
"""

from typing import Optional


class TimelineError(Exception):
    """Erro base da engine, com código legível por máquina"""

    code: str = "INTERNAL_ERROR"
    message: str = "Erro inesperado na engine de timeline"

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None):
        self.message = message or self.__class__.message
        if code:
            self.code = code
        super().__init__(self.message)


# Erros estruturais (síncronos, não alteram o estado)


class InvalidClipError(TimelineError, ValueError):
    """Clipe com valores inválidos (duração, volume, posição...)"""

    code = "INVALID_CLIP"
    message = "Clipe inválido"


class UnknownClipIdError(TimelineError, LookupError):
    """Operação sobre um id de clipe inexistente"""

    code = "UNKNOWN_CLIP_ID"
    message = "Clipe não encontrado"

    def __init__(self, clip_id: str):
        self.clip_id = clip_id
        super().__init__(f"Clipe não encontrado: {clip_id}")


class InvalidSplitPointError(TimelineError):
    """Ponto de corte fora do intervalo estritamente interno do clipe"""

    code = "INVALID_SPLIT_POINT"
    message = "O ponto de corte deve estar dentro do clipe"

    def __init__(self, clip_id: str, at_time: float, start: float, end: float):
        self.clip_id = clip_id
        self.at_time = at_time
        super().__init__(
            f"Ponto de corte {at_time}s fora do clipe {clip_id} ({start}s..{end}s)"
        )


class TimelineBusyError(TimelineError):
    """Mutação concorrente na timeline"""

    code = "TIMELINE_BUSY"
    message = "Outra operação está alterando a timeline"


class MissingSourceError(TimelineError):
    """Clipe de vídeo/áudio sem referência de mídia"""

    code = "MISSING_SOURCE"
    message = "Clipe sem mídia de origem"


class IncompleteTextStyleError(TimelineError):
    """Clipe de texto sem algum atributo obrigatório de estilo"""

    code = "INCOMPLETE_TEXT_STYLE"
    message = "Clipe de texto com estilo incompleto"


class EmptyTimelineExportError(TimelineError):
    """Exportação pedida com a timeline vazia"""

    code = "EMPTY_TIMELINE"
    message = "Não é possível exportar um vídeo vazio"


# Erros de exportação (assíncronos, abortam a exportação)


class ExportError(TimelineError):
    """Falha genérica de exportação"""

    code = "EXPORT_FAILED"
    message = "Falha na exportação"


class EngineFailureError(ExportError):
    """Erro do FFmpeg, repassado sem alteração"""

    code = "ENGINE_FAILURE"
    message = "FFmpeg falhou"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class MediaFetchError(ExportError):
    """Não foi possível obter uma mídia de origem ou fonte"""

    code = "MEDIA_FETCH_FAILED"
    message = "Falha ao carregar mídia"


class ExportInProgressError(ExportError):
    """Já existe uma exportação em andamento"""

    code = "EXPORT_IN_PROGRESS"
    message = "Já existe uma exportação em andamento"


class ExportCancelledError(ExportError):
    """Exportação cancelada pelo chamador"""

    code = "EXPORT_CANCELLED"
    message = "Exportação cancelada"
