"""Transcoder Adapter: normaliza audio via ffmpeg externo.

Conversao e best-effort: qualquer falha (ffmpeg ausente, exit code != 0,
arquivo de saida ausente) resulta em None e o chamador segue com o audio
original. Apenas o cancelamento da task atravessa convert(); nesse caso o
ffmpeg e encerrado e a saida parcial removida antes de propagar.
"""

from __future__ import annotations

import asyncio
import contextlib
import shutil
import subprocess
from pathlib import Path

from voxmod.logging import get_logger

logger = get_logger("audio.transcoder")

# Formato canonico: WAV PCM 24-bit, 48kHz, mono
CANONICAL_SAMPLE_RATE = 48000
CANONICAL_CHANNELS = 1
CANONICAL_CODEC = "pcm_s24le"

# highpass remove ruido grave (<80Hz), lowpass remove chiado (>12kHz), afftdn reduz ruido
FILTER_CHAIN = "highpass=f=80,lowpass=f=12000,afftdn=nf=-25"

_PROBE_TIMEOUT_S = 10.0


def output_path_for(source: Path) -> Path:
    """Caminho do WAV gerado por convert() para source (`<source>.wav`)."""
    return source.with_name(source.name + ".wav")


def build_ffmpeg_command(binary: str, source: Path, output: Path) -> list[str]:
    """Argumentos do ffmpeg para converter source no formato canonico."""
    return [
        binary,
        "-y",
        "-i",
        str(source),
        "-vn",
        "-acodec",
        CANONICAL_CODEC,
        "-ar",
        str(CANONICAL_SAMPLE_RATE),
        "-ac",
        str(CANONICAL_CHANNELS),
        "-af",
        FILTER_CHAIN,
        str(output),
    ]


class FFmpegTranscoder:
    """Converte audio para WAV canonico usando o binario ffmpeg.

    A disponibilidade e descoberta uma unica vez via probe() no startup.
    """

    def __init__(self, binary: str = "ffmpeg", *, available: bool | None = None) -> None:
        self._binary = binary
        self._available = available

    @property
    def binary(self) -> str:
        return self._binary

    @property
    def available(self) -> bool:
        if self._available is None:
            self._available = self.probe()
        return self._available

    def probe(self) -> bool:
        """Verifica se o ffmpeg existe e executa (`ffmpeg -version`)."""
        if shutil.which(self._binary) is None:
            logger.info("ffmpeg_not_found", binary=self._binary)
            self._available = False
            return False
        try:
            completed = subprocess.run(  # noqa: S603
                [self._binary, "-version"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=_PROBE_TIMEOUT_S,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.warning("ffmpeg_probe_failed", binary=self._binary, error=str(exc))
            self._available = False
            return False

        self._available = completed.returncode == 0
        logger.info("ffmpeg_probed", binary=self._binary, available=self._available)
        return self._available

    async def convert(self, source: Path, mime_type: str) -> Path | None:
        """Converte source para WAV canonico em `<source>.wav`.

        Args:
            source: Arquivo de audio original.
            mime_type: MIME declarado do original (apenas para log).

        Returns:
            Caminho do arquivo convertido, ou None se nenhuma conversao foi feita.
        """
        if not self.available:
            logger.info("transcode_skipped", reason="ffmpeg_unavailable", mime_type=mime_type)
            return None

        output = output_path_for(source)
        command = build_ffmpeg_command(self._binary, source, output)
        logger.info("transcode_start", mime_type=mime_type, source=str(source))

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.warning("transcode_failed", error=str(exc), mime_type=mime_type)
            output.unlink(missing_ok=True)
            return None

        try:
            _, stderr = await process.communicate()
        except BaseException:
            # ffmpeg nao pode sobreviver a request: mata antes de remover a saida
            logger.warning("transcode_aborted", mime_type=mime_type, pid=process.pid)
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
            output.unlink(missing_ok=True)
            await process.wait()
            raise

        if process.returncode != 0:
            logger.warning(
                "transcode_failed",
                exit_code=process.returncode,
                stderr=stderr.decode("utf-8", errors="ignore")[-500:],
                mime_type=mime_type,
            )
            output.unlink(missing_ok=True)
            return None

        if not output.exists():
            logger.warning("transcode_failed", reason="output_missing", mime_type=mime_type)
            return None

        logger.info(
            "transcode_done",
            output=str(output),
            size_kb=round(output.stat().st_size / 1024, 2),
        )
        return output
