import os
import tempfile
import time
import unittest

import numpy as np
import soundfile as sf

from flute_pitch.audio.file_input import ArrayAudioInput, WavFileInput

SAMPLE_RATE = 44100


class TestArrayAudioInput(unittest.TestCase):
    def setUp(self):
        self.chunks = []
        self.signal = np.linspace(-1.0, 1.0, 2500)

    def collect(self, samples, timestamp):
        self.chunks.append((samples.copy(), timestamp))

    def test_nothing_delivered_before_start(self):
        audio = ArrayAudioInput(self.signal, SAMPLE_RATE)
        self.assertFalse(audio.pump())
        self.assertFalse(audio.is_running())

    def test_chunks_and_timestamps(self):
        audio = ArrayAudioInput(self.signal, SAMPLE_RATE, chunk_size=1000)
        self.assertTrue(audio.start(self.collect))
        self.assertEqual(audio.pump_all(), 3)

        self.assertEqual([len(c) for c, _ in self.chunks], [1000, 1000, 500])
        self.assertEqual(audio.position, 2500)
        self.assertEqual([ts for _, ts in self.chunks], [0.0, 1000 / SAMPLE_RATE, 2000 / SAMPLE_RATE])
        np.testing.assert_allclose(np.concatenate([c for c, _ in self.chunks]), self.signal, atol=1e-6)
        self.assertFalse(audio.pump())

    def test_stop(self):
        audio = ArrayAudioInput(self.signal, SAMPLE_RATE, chunk_size=1000)
        audio.start(self.collect)
        audio.pump()
        audio.stop()
        self.assertFalse(audio.pump())
        self.assertEqual(len(self.chunks), 1)

    def test_loop(self):
        audio = ArrayAudioInput(self.signal, SAMPLE_RATE, chunk_size=1000, loop=True)
        audio.start(self.collect)
        for _ in range(5):
            self.assertTrue(audio.pump())
        self.assertEqual(self.chunks[3][1], 0.0)
        with self.assertRaises(ValueError):
            audio.pump_all()

    def test_gain_and_first_channel(self):
        stereo = np.column_stack([np.full(10, 0.5), np.full(10, -0.5)])
        audio = ArrayAudioInput(stereo, SAMPLE_RATE, chunk_size=10, gain=0.5)
        audio.start(self.collect)
        audio.pump()
        np.testing.assert_allclose(self.chunks[0][0], np.full(10, 0.25))

    def test_duration(self):
        audio = ArrayAudioInput(np.zeros(22050), SAMPLE_RATE)
        self.assertAlmostEqual(audio.duration, 0.5)
        self.assertEqual(audio.sample_rate, SAMPLE_RATE)

    def test_realtime_delivery(self):
        audio = ArrayAudioInput(np.zeros(4410), SAMPLE_RATE, chunk_size=1024, realtime=True)
        audio.start(self.collect)
        deadline = time.time() + 5.0
        while audio.is_running() and time.time() < deadline:
            time.sleep(0.01)
        audio.stop()
        self.assertEqual(len(self.chunks), 5)

    def test_invalid_chunk_size(self):
        with self.assertRaises(ValueError):
            ArrayAudioInput(self.signal, SAMPLE_RATE, chunk_size=0)


class TestWavFileInput(unittest.TestCase):
    def test_reads_first_channel(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "stereo.wav")
            t = np.arange(4800) / 48000
            left = 0.5 * np.sin(2 * np.pi * 440 * t)
            sf.write(path, np.column_stack([left, np.zeros_like(left)]), 48000)

            chunks = []
            audio = WavFileInput(path, chunk_size=2400)
            self.assertEqual(audio.sample_rate, 48000)
            self.assertEqual(audio.file_path, path)
            audio.start(lambda samples, ts: chunks.append(samples))
            self.assertEqual(audio.pump_all(), 2)

        np.testing.assert_allclose(np.concatenate(chunks), left, atol=1e-3)

    def test_missing_file(self):
        with self.assertRaises(RuntimeError):
            WavFileInput("/nonexistent/recording.wav")


if __name__ == "__main__":
    unittest.main()
