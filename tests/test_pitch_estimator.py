import dataclasses
import unittest

import numpy as np

from flute_pitch import ConfigError, DetectorConfig, PitchEstimator, SampleWindow

SAMPLE_RATE = 44100
WINDOW = 4096


def tone_window(frequency, amplitude=0.9):
    t = np.arange(WINDOW) / SAMPLE_RATE
    return SampleWindow.from_samples(amplitude * np.sin(2 * np.pi * frequency * t), SAMPLE_RATE)


def silent_window():
    return SampleWindow.from_samples(np.zeros(WINDOW), SAMPLE_RATE)


class TestPitchEstimator(unittest.TestCase):
    def setUp(self):
        self.estimator = PitchEstimator()

    def test_pure_g4(self):
        estimate = self.estimator.estimate(tone_window(392.0))
        self.assertIsNotNone(estimate)
        self.assertEqual(estimate.note, "G")
        self.assertEqual(estimate.octave, 4)
        self.assertEqual(estimate.full_note, "G4")
        self.assertEqual(estimate.midi_note, 67)
        self.assertLessEqual(abs(estimate.cents), 5)
        self.assertAlmostEqual(estimate.frequency, 392.0, delta=1.5)
        self.assertEqual(estimate.confidence, 1.0)

    def test_a4(self):
        estimate = self.estimator.estimate(tone_window(440.0))
        self.assertEqual(estimate.full_note, "A4")
        self.assertAlmostEqual(estimate.raw_frequency, 440.0, delta=2.0)

    def test_silence(self):
        self.assertIsNone(self.estimator.estimate(silent_window()))

    def test_below_silence_threshold(self):
        self.assertIsNone(self.estimator.estimate(tone_window(392.0, amplitude=0.01)))

    def test_quiet_tone_with_lower_threshold(self):
        estimator = PitchEstimator(silence_rms_threshold=0.005)
        estimate = estimator.estimate(tone_window(392.0, amplitude=0.01))
        self.assertIsNotNone(estimate)
        self.assertEqual(estimate.note, "G")

    def test_out_of_range(self):
        self.assertIsNone(self.estimator.estimate(tone_window(100.0)))
        self.assertIsNone(self.estimator.estimate(tone_window(2000.0)))

    def test_custom_range(self):
        estimator = PitchEstimator(min_freq=80.0, max_freq=1200.0)
        estimate = estimator.estimate(tone_window(100.0))
        self.assertIsNotNone(estimate)
        self.assertEqual(estimate.note, "G")  # ~G2

    def test_noise(self):
        rng = np.random.default_rng(7)
        window = SampleWindow.from_samples(rng.uniform(-0.5, 0.5, WINDOW), SAMPLE_RATE)
        self.assertIsNone(self.estimator.estimate(window))

    def test_smoothing_holds_through_outlier(self):
        for _ in range(3):
            self.estimator.estimate(tone_window(392.0))
        estimate = self.estimator.estimate(tone_window(440.0))
        self.assertEqual(estimate.note, "G")
        self.assertLess(estimate.confidence, 1.0)

    def test_silence_resets_smoothing(self):
        for _ in range(3):
            self.estimator.estimate(tone_window(392.0))
        self.assertIsNone(self.estimator.estimate(silent_window()))
        self.assertEqual(self.estimator.smoothing.history, ())

        estimate = self.estimator.estimate(tone_window(440.0))
        self.assertEqual(estimate.note, "A")
        self.assertAlmostEqual(estimate.frequency, estimate.raw_frequency, delta=0.05)
        self.assertEqual(estimate.confidence, 1.0)

    def test_out_of_range_resets_smoothing(self):
        self.estimator.estimate(tone_window(392.0))
        self.assertIsNone(self.estimator.estimate(tone_window(2000.0)))
        self.assertEqual(self.estimator.smoothing.history, ())

    def test_confidence_drops_with_jitter(self):
        self.estimator.estimate(tone_window(392.0))
        estimate = self.estimator.estimate(tone_window(420.0))
        self.assertLess(estimate.confidence, 0.8)
        self.assertGreater(estimate.confidence, 0.0)

    def test_reset(self):
        self.estimator.estimate(tone_window(392.0))
        self.estimator.reset()
        self.assertEqual(self.estimator.smoothing.history, ())
        self.assertEqual(self.estimator.smoothing.last_frequency, 0.0)

    def test_instances_are_independent(self):
        other = PitchEstimator()
        self.estimator.estimate(tone_window(392.0))
        self.assertEqual(other.smoothing.history, ())
        estimate = other.estimate(tone_window(440.0))
        self.assertEqual(estimate.note, "A")

    def test_estimate_is_frozen(self):
        estimate = self.estimator.estimate(tone_window(392.0))
        with self.assertRaises(dataclasses.FrozenInstanceError):
            estimate.frequency = 0.0
        self.assertEqual(estimate.as_dict()["full_note"], "G4")

    def test_window_is_read_only(self):
        window = tone_window(392.0)
        with self.assertRaises(ValueError):
            window.samples[0] = 1.0

    def test_reference_pitch(self):
        estimator = PitchEstimator(a4_reference=415.0)
        estimate = estimator.estimate(tone_window(415.0))
        self.assertEqual(estimate.full_note, "A4")

    def test_invalid_config(self):
        with self.assertRaises(ConfigError):
            PitchEstimator(min_freq=1500.0)
        with self.assertRaises(ConfigError):
            PitchEstimator(DetectorConfig(), smoothing_factor=1.5)
        with self.assertRaises(ConfigError):
            PitchEstimator(unknown_option=1)


if __name__ == "__main__":
    unittest.main()
