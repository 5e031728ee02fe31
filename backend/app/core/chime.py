"""
End-of-step chime: a short sine beep with a fast attack and a linear
release, rendered as 16-bit mono WAV for the browser to play as-is.
"""

import base64
import io
from functools import lru_cache
from typing import Optional

import numpy as np
import soundfile as sf

from .config import Settings, get_settings

ATTACK_SEC = 0.01


def synthesize(frequency_hz: float, duration_sec: float, sample_rate: int) -> np.ndarray:
    n = max(int(round(duration_sec * sample_rate)), 1)
    t = np.arange(n) / sample_rate
    attack = min(ATTACK_SEC, duration_sec)
    envelope = np.interp(t, [0.0, attack, duration_sec], [0.0, 1.0, 0.0])
    tone = np.sin(2 * np.pi * frequency_hz * t) * envelope
    return np.clip(tone, -1.0, 1.0).astype(np.float32)


@lru_cache(maxsize=8)
def _render_wav(frequency_hz: float, duration_sec: float, sample_rate: int) -> bytes:
    buf = io.BytesIO()
    sf.write(
        buf,
        synthesize(frequency_hz, duration_sec, sample_rate),
        sample_rate,
        format="WAV",
        subtype="PCM_16",
    )
    return buf.getvalue()


class Chime:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()

    def wav_bytes(self) -> bytes:
        return _render_wav(
            self.settings.chime_frequency_hz,
            self.settings.chime_duration_sec,
            self.settings.chime_sample_rate,
        )

    def as_base64(self) -> str:
        return base64.b64encode(self.wav_bytes()).decode("ascii")
