"""voxmod: backend de captura de voz para clonagem e sintese (TTS)."""

__version__ = "1.0.0"
