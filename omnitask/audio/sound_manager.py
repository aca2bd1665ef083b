"""
Sound Manager — short cue tones for the brain-break popup.

Uses pygame.mixer for lightweight audio. All cues are synthesized in memory
(no audio files). One SoundManager lives exactly as long as one popup; its
mixer is shut down again by release().
"""

from __future__ import annotations

import logging
import math
import struct
import wave
from io import BytesIO
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

SAMPLE_RATE = 22050

# Whether pygame mixer is available
_mixer_available = False
try:
    import pygame.mixer
    _mixer_available = True
except ImportError:
    logger.warning("pygame not installed; game sounds will be disabled.")


class SoundManager:
    """Plays the start/success/error/click cues at a given volume."""

    def __init__(self, enabled: bool = True, volume: float = 1.0) -> None:
        self.enabled = enabled
        self.volume = max(0.0, min(volume, 1.0))
        self._initialized = False
        self._sounds: Dict[str, object] = {}

        if _mixer_available and enabled and self.volume > 0:
            self._init_mixer()

    def _init_mixer(self) -> None:
        try:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1, buffer=512)
            self._initialized = True
            self._load_sounds()
            logger.info("Game audio initialized.")
        except Exception as e:
            logger.warning("Could not init audio: %s", e)

    def _load_sounds(self) -> None:
        cue_specs: Dict[str, Callable[[], bytes]] = {
            "start": self._gen_start,
            "success": self._gen_success,
            "error": self._gen_error,
            "click": self._gen_click,
        }
        for name, gen_func in cue_specs.items():
            try:
                sound = pygame.mixer.Sound(file=BytesIO(gen_func()))
                sound.set_volume(self.volume)
                self._sounds[name] = sound
            except Exception as e:
                logger.warning("Could not load sound %s: %s", name, e)

    # ── Public API ──────────────────────────────────────────────────────────

    def play(self, cue: str) -> None:
        """Play a named cue. Unknown names and a missing mixer are ignored."""
        if not self.enabled or not self._initialized:
            return
        sound = self._sounds.get(cue)
        if sound:
            sound.play()

    def release(self) -> None:
        """Stop playback and shut the mixer down. Safe to call twice."""
        if not self._initialized:
            return
        self._initialized = False
        try:
            for s in self._sounds.values():
                s.stop()
            self._sounds.clear()
            pygame.mixer.quit()
            logger.info("Game audio released.")
        except Exception as e:
            logger.debug("Error while releasing audio: %s", e)

    # ── Cue generators (simple waveforms) ───────────────────────────────────

    @staticmethod
    def _make_wav(samples: List[float], sample_rate: int = SAMPLE_RATE) -> bytes:
        """Pack raw samples into a WAV byte string."""
        buf = BytesIO()
        with wave.open(buf, "wb") as w:
            w.setnchannels(1)
            w.setsampwidth(2)
            w.setframerate(sample_rate)
            data = b"".join(struct.pack("<h", int(max(-32767, min(32767, s)))) for s in samples)
            w.writeframes(data)
        return buf.getvalue()

    @classmethod
    def _gen_start(cls) -> bytes:
        """Rising sine sweep (C5 → A5) with an exponential tail."""
        sr = SAMPLE_RATE
        samples = []
        phase = 0.0
        for t in range(int(sr * 0.5)):
            sec = t / sr
            freq = 523.25 * (880 / 523.25) ** min(sec / 0.1, 1.0)
            phase += 2 * math.pi * freq / sr
            amp = 8000 * math.exp(-sec / 0.2)
            samples.append(amp * math.sin(phase))
        return cls._make_wav(samples)

    @classmethod
    def _gen_success(cls) -> bytes:
        """Four-step triangle arpeggio (C5 E5 G5 C6) fading out."""
        sr = SAMPLE_RATE
        samples = []
        total = int(sr * 0.6)
        freqs = [523.25, 659.25, 783.99, 1046.50]
        for t in range(total):
            freq = freqs[min(int((t / sr) / 0.1), len(freqs) - 1)]
            pos = (t * freq / sr) % 1.0
            tri = 4 * abs(pos - 0.5) - 1
            amp = 7000 * (1 - t / total)
            samples.append(amp * tri)
        return cls._make_wav(samples)

    @classmethod
    def _gen_error(cls) -> bytes:
        """Low falling sawtooth buzz."""
        sr = SAMPLE_RATE
        samples = []
        total = int(sr * 0.3)
        for t in range(total):
            freq = 150 - 50 * (t / total)
            pos = (t * freq / sr) % 1.0
            amp = 6000 * (1 - t / total)
            samples.append(amp * (2 * pos - 1))
        return cls._make_wav(samples)

    @classmethod
    def _gen_click(cls) -> bytes:
        """Short soft tick."""
        sr = SAMPLE_RATE
        samples = []
        for t in range(int(sr * 0.1)):
            amp = 4000 * math.exp(-t / (sr * 0.03))
            samples.append(amp * math.sin(2 * math.pi * 800 * t / sr))
        return cls._make_wav(samples)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Synthesizes four tiny cue sounds and plays them through pygame.mixer
#   while a brain-break popup is open.
#
# Key design decisions:
#   - Scoped lifetime: the popup creates a SoundManager and the game session
#     calls release() when it completes, so the audio device is never held
#     while no game is on screen.
#   - Graceful degradation: without pygame or an audio device, play() is a
#     no-op. Sound is cosmetic and must never break a game.
#   - Waveforms: sine sweep for "start", triangle arpeggio for "success",
#     sawtooth buzz for "error", short decaying sine for "click".
#
# Interviewer-friendly talking points:
#   1. The start sweep accumulates phase instead of computing sin(2πft):
#      with a changing frequency that avoids clicks in the waveform.
#   2. Samples are clamped to the 16-bit range before packing.
