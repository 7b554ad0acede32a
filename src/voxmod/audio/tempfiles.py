"""Arquivos temporarios com liberacao garantida.

Todo arquivo criado durante uma request (upload, copia com extensao,
saida do transcoder) e registrado em um TempFileScope e removido na saida
do escopo, inclusive quando uma exception atravessa o bloco.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from voxmod.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

logger = get_logger("audio.tempfiles")


def _unlink(path: Path) -> bool:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("temp_cleanup_failed", path=str(path), error=str(exc))
        return False
    return True


class TempFileScope:
    """Coleta caminhos temporarios e remove todos ao sair do escopo.

    Uso:
        with TempFileScope() as scope:
            scope.track(upload_path)
            ...
    """

    def __init__(self) -> None:
        self._paths: list[Path] = []

    def track(self, path: Path) -> Path:
        """Registra um caminho para remocao; retorna o proprio caminho."""
        if path not in self._paths:
            self._paths.append(path)
        return path

    @property
    def paths(self) -> tuple[Path, ...]:
        return tuple(self._paths)

    def release(self) -> None:
        """Remove todos os arquivos registrados. Seguro para chamar mais de uma vez."""
        for path in self._paths:
            if path.exists() and _unlink(path):
                logger.debug("temp_cleaned", path=str(path))
        self._paths.clear()

    def __enter__(self) -> TempFileScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


def new_temp_path(directory: Path, suffix: str = "") -> Path:
    """Reserva um caminho unico em directory (o arquivo e criado vazio)."""
    directory.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(dir=directory, suffix=suffix, prefix="upload-")
    os.close(fd)
    return Path(name)


@contextmanager
def temporary_copy_with_suffix(path: Path, suffix: str) -> Iterator[Path]:
    """Copia path para path+suffix durante o bloco e remove a copia na saida."""
    copy = path.with_name(path.name + suffix)
    shutil.copyfile(path, copy)
    logger.debug("temp_copy_created", path=str(copy))
    try:
        yield copy
    finally:
        _unlink(copy)
