# audio.py

import time
import numpy as np
import pygame
import logging

from constants import FFT_SIZE, FFT_SMOOTHING, FFT_MIN_DB, FFT_MAX_DB, BASS_BAND

logger = logging.getLogger("dotwave")


def to_mono_float(raw: np.ndarray) -> np.ndarray:
    """Converts an (n,) or (n, channels) sample array of any dtype to mono floats in [-1, 1]."""
    samples = np.asarray(raw)
    if samples.dtype.kind == 'u':
        info = np.iinfo(samples.dtype)
        middle = (info.max + 1) / 2
        samples = (samples.astype(np.float64) - middle) / middle
    elif samples.dtype.kind == 'i':
        samples = samples.astype(np.float64) / np.iinfo(samples.dtype).max
    else:
        samples = samples.astype(np.float64)
    if samples.ndim == 2:
        samples = samples.mean(axis=1)
    return samples


class BassMeter:
    """
    Measures low-frequency energy on a 0-255 scale, one analysis window at a time.

    Each window is Blackman-weighted and transformed; bin magnitudes are smoothed
    against the previous window, converted to dB, and mapped from
    [FFT_MIN_DB, FFT_MAX_DB] onto [0, 255]. The reported energy is the mean level
    of the bins inside `band`.
    """
    def __init__(self, sample_rate: int, fft_size: int = FFT_SIZE, smoothing: float = FFT_SMOOTHING,
                 band=BASS_BAND):
        self.sample_rate = sample_rate
        self.fft_size = fft_size
        self.smoothing = smoothing
        self.window = np.blackman(fft_size)
        self.num_bins = fft_size // 2

        nyquist = sample_rate / 2
        self.low_bin = int(round(band[0] / nyquist * self.num_bins))
        self.high_bin = min(self.num_bins - 1, int(round(band[1] / nyquist * self.num_bins)))
        self.smoothed = np.zeros(self.num_bins)

    def reset(self):
        self.smoothed.fill(0.0)

    def analyze(self, frame: np.ndarray) -> float:
        frame = np.asarray(frame, dtype=np.float64)
        if frame.shape[0] < self.fft_size:
            frame = np.pad(frame, (self.fft_size - frame.shape[0], 0))
        else:
            frame = frame[-self.fft_size:]

        magnitudes = np.abs(np.fft.rfft(frame * self.window))[:self.num_bins] / self.fft_size
        self.smoothed = self.smoothing * self.smoothed + (1.0 - self.smoothing) * magnitudes

        with np.errstate(divide='ignore'):
            decibels = 20.0 * np.log10(self.smoothed)
        levels = np.clip((decibels - FFT_MIN_DB) / (FFT_MAX_DB - FFT_MIN_DB) * 255.0, 0.0, 255.0)
        return float(np.mean(levels[self.low_bin:self.high_bin + 1]))


class AudioTrack:
    """
    A decoded music track played through pygame.mixer, looping.

    Playback position is tracked with a wall clock (pygame does not report the
    position of a looping Sound), so the analysis window follows what is heard.
    bass_energy() returns 0.0 whenever the track is not playing.
    """
    def __init__(self, sound, samples: np.ndarray, sample_rate: int, clock=time.perf_counter):
        self.sound = sound
        self.samples = samples
        self.sample_rate = sample_rate
        self.meter = BassMeter(sample_rate)
        self._clock = clock
        self._channel = None
        self._elapsed = 0.0
        self._resumed_at = None

    @classmethod
    def load(cls, path: str):
        """
        Decodes a track for playback and analysis. Returns None (audio unavailable)
        when the mixer is not running or the file cannot be decoded.
        """
        mixer_info = pygame.mixer.get_init()
        if not mixer_info:
            logger.warning("Audio mixer unavailable; running without sound.")
            return None
        try:
            sound = pygame.mixer.Sound(path)
        except (pygame.error, FileNotFoundError) as e:
            logger.warning(f"Failed to load sound '{path}': {e}")
            return None

        samples = to_mono_float(pygame.sndarray.array(sound))
        if samples.shape[0] == 0:
            logger.warning(f"Sound '{path}' contains no samples.")
            return None
        logger.info(f"Sound '{path}' loaded OK ({samples.shape[0] / mixer_info[0]:.1f}s).")
        return cls(sound, samples, mixer_info[0])

    @property
    def is_playing(self) -> bool:
        return self._resumed_at is not None

    def play(self):
        if self.is_playing:
            return
        if self._channel is None:
            self._channel = self.sound.play(loops=-1)
        else:
            self._channel.unpause()
        self._resumed_at = self._clock()

    def pause(self):
        if not self.is_playing:
            return
        if self._channel is not None:
            self._channel.pause()
        self._elapsed += self._clock() - self._resumed_at
        self._resumed_at = None
        self.meter.reset()

    def toggle(self):
        if self.is_playing:
            self.pause()
        else:
            self.play()
        logger.info(f"Playback {'resumed' if self.is_playing else 'paused'}.")

    def position_seconds(self) -> float:
        elapsed = self._elapsed
        if self.is_playing:
            elapsed += self._clock() - self._resumed_at
        return elapsed

    def current_window(self) -> np.ndarray:
        """The FFT_SIZE samples that end at the current playback position, wrapping around the loop."""
        end = int(self.position_seconds() * self.sample_rate) % self.samples.shape[0]
        indices = np.arange(end - self.meter.fft_size, end) % self.samples.shape[0]
        return self.samples[indices]

    def bass_energy(self) -> float:
        if not self.is_playing:
            return 0.0
        return self.meter.analyze(self.current_window())
