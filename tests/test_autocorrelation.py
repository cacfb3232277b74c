import math
import unittest

import numpy as np

from flute_pitch.audio.autocorrelation import NO_PITCH, auto_correlate, rms

SAMPLE_RATE = 44100
WINDOW = 4096


def tone(frequency, amplitude=0.9, length=WINDOW, sample_rate=SAMPLE_RATE):
    t = np.arange(length) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t)


def cents_between(frequency, reference):
    return 1200 * math.log2(frequency / reference)


class TestRms(unittest.TestCase):
    def test_silence(self):
        self.assertEqual(rms(np.zeros(WINDOW)), 0.0)

    def test_empty(self):
        self.assertEqual(rms(np.array([])), 0.0)

    def test_sine(self):
        self.assertAlmostEqual(rms(tone(440.0, amplitude=1.0)), 1 / math.sqrt(2), places=2)

    def test_constant(self):
        self.assertAlmostEqual(rms(np.full(100, -0.5)), 0.5)


class TestAutoCorrelate(unittest.TestCase):
    def test_flute_range_tones(self):
        for frequency in (262.0, 392.0, 440.0, 587.3, 880.0):
            estimate = auto_correlate(tone(frequency), SAMPLE_RATE)
            self.assertNotEqual(estimate, NO_PITCH)
            self.assertLess(abs(cents_between(estimate, frequency)), 10, frequency)

    def test_g4_interpolation(self):
        estimate = auto_correlate(tone(392.0), SAMPLE_RATE)
        self.assertLessEqual(abs(cents_between(estimate, 392.0)), 5)

    def test_other_sample_rate(self):
        estimate = auto_correlate(tone(440.0, sample_rate=48000), 48000)
        self.assertLess(abs(cents_between(estimate, 440.0)), 10)

    def test_silence(self):
        self.assertEqual(auto_correlate(np.zeros(WINDOW), SAMPLE_RATE), NO_PITCH)

    def test_white_noise(self):
        rng = np.random.default_rng(1234)
        noise = rng.uniform(-0.5, 0.5, WINDOW)
        self.assertEqual(auto_correlate(noise, SAMPLE_RATE), NO_PITCH)

    def test_fundamental_not_harmonic(self):
        # Strong second harmonic must not pull the estimate up an octave
        t = np.arange(WINDOW) / SAMPLE_RATE
        signal = 0.4 * np.sin(2 * np.pi * 392 * t) + 0.4 * np.sin(2 * np.pi * 784 * t)
        estimate = auto_correlate(signal, SAMPLE_RATE)
        self.assertLess(abs(cents_between(estimate, 392.0)), 20)

    def test_tiny_buffer(self):
        self.assertEqual(auto_correlate(np.array([0.1, -0.1, 0.1]), SAMPLE_RATE), NO_PITCH)

    def test_input_not_modified(self):
        samples = tone(440.0)
        original = samples.copy()
        auto_correlate(samples, SAMPLE_RATE)
        np.testing.assert_array_equal(samples, original)


if __name__ == "__main__":
    unittest.main()
