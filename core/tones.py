"""Synthesized feedback sounds as 16-bit mono PCM."""

import numpy as np

from .config import SAMPLE_RATE, PEAK_VOLUME, ATTACK_SECONDS

C5, E5, G5 = 523.25, 659.25, 783.99
C6, E6, G6 = 1046.50, 1318.51, 1567.98


def _oscillator(waveform: str, frequency: float, t: np.ndarray) -> np.ndarray:
    phase = (frequency * t) % 1.0
    if waveform == 'sine':
        return np.sin(2 * np.pi * frequency * t)
    if waveform == 'triangle':
        return 1.0 - 4.0 * np.abs(phase - 0.5)
    if waveform == 'square':
        return np.where(phase < 0.5, 1.0, -1.0)
    if waveform == 'sawtooth':
        return 2.0 * phase - 1.0
    raise ValueError(f"Unknown waveform: {waveform}")


def envelope(num_samples: int, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Linear ramp up to the peak volume, then linear decay to silence."""
    attack = min(num_samples, int(ATTACK_SECONDS * sample_rate))
    env = np.zeros(num_samples)
    if attack > 0:
        env[:attack] = np.linspace(0, PEAK_VOLUME, attack, endpoint=False)
    decay = num_samples - attack
    if decay > 0:
        env[attack:] = np.linspace(PEAK_VOLUME, 0, decay)
    return env


def tone(frequency: float, duration_ms: float, waveform: str = 'sine',
         sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Render one note as float samples in [-PEAK_VOLUME, PEAK_VOLUME]."""
    num_samples = int(sample_rate * duration_ms / 1000)
    t = np.arange(num_samples) / sample_rate
    return _oscillator(waveform, frequency, t) * envelope(num_samples, sample_rate)


def sequence(notes: list[tuple], sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Mix notes given as (offset_ms, frequency, duration_ms, waveform) into int16 PCM."""
    if not notes:
        return np.zeros(0, dtype=np.int16)
    rendered = []
    length = 0
    for offset_ms, frequency, duration_ms, waveform in notes:
        start = int(sample_rate * offset_ms / 1000)
        samples = tone(frequency, duration_ms, waveform, sample_rate)
        rendered.append((start, samples))
        length = max(length, start + len(samples))
    mix = np.zeros(length)
    for start, samples in rendered:
        mix[start:start + len(samples)] += samples
    mix = np.clip(mix, -1.0, 1.0)
    return (mix * 32767).astype(np.int16)


def key_correct_sound() -> np.ndarray:
    return sequence([(0, G5, 150, 'triangle')])


def key_error_sound() -> np.ndarray:
    return sequence([(0, 164.81, 250, 'sine')])


def word_complete_sound() -> np.ndarray:
    return sequence([
        (0, C5, 100, 'sine'),
        (150, E5, 100, 'sine'),
        (300, G5, 100, 'sine'),
        (450, C6, 300, 'sine'),
    ])


def level_up_fanfare() -> np.ndarray:
    return sequence([
        (0, C5, 100, 'triangle'),
        (120, G5, 100, 'triangle'),
        (240, C6, 250, 'triangle'),
        (550, E6, 400, 'triangle'),
        (550, G6, 400, 'triangle'),
    ])
