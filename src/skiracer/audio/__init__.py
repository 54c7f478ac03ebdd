"""Synthesized race sounds."""

from .engine import SoundBoard, build_sound_bank

__all__ = ["SoundBoard", "build_sound_bank"]
