"""Tratamento de audio recebido: classificacao de formato, transcoding e temporarios.

Fluxo: Upload -> [Classificacao] -> [Transcoding opcional p/ WAV 48kHz mono] -> Provider.
"""

from __future__ import annotations

from voxmod.audio.formats import classify, ensure_supported
from voxmod.audio.tempfiles import TempFileScope
from voxmod.audio.transcoder import FFmpegTranscoder

__all__ = ["FFmpegTranscoder", "TempFileScope", "classify", "ensure_supported"]
