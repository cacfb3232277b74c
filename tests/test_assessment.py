import unittest

from flute_pitch.assessment import HoldTracker, NoteCapture, ScaleAssessment
from flute_pitch.note_types import MatchResult, PitchEstimate
from flute_pitch.note_utils import frequency_to_note, note_to_frequency


def estimate_for(name, cents=0):
    frequency = note_to_frequency(name) * 2 ** (cents / 1200)
    info = frequency_to_note(frequency)
    return PitchEstimate.from_note_info(info, confidence=1.0, raw_frequency=frequency)


class TestNoteCapture(unittest.TestCase):
    def test_empty(self):
        self.assertIsNone(NoteCapture().summarize())

    def test_most_common_note(self):
        capture = NoteCapture()
        for name in ["G4", "G4", "A4", "G4", None, "F#4"]:
            capture.add(estimate_for(name) if name else None)
        self.assertEqual(len(capture), 5)

        summary = capture.summarize()
        self.assertEqual(summary.note, "G4")
        self.assertEqual(summary.samples, 3)
        self.assertEqual(summary.frequency, 392.0)
        self.assertFalse(summary.skipped)

    def test_tie_goes_to_first_heard(self):
        capture = NoteCapture()
        for name in ["D5", "E5", "E5", "D5"]:
            capture.add(estimate_for(name))
        self.assertEqual(capture.summarize().note, "D5")

    def test_mean_frequency(self):
        capture = NoteCapture()
        capture.add(estimate_for("A4", cents=-10))
        capture.add(estimate_for("A4", cents=10))
        self.assertAlmostEqual(capture.summarize().frequency, 440.0, delta=0.1)

    def test_clear(self):
        capture = NoteCapture()
        capture.add(estimate_for("C5"))
        capture.clear()
        self.assertEqual(len(capture), 0)


class TestScaleAssessment(unittest.TestCase):
    def play(self, assessment, name, count=4):
        assessment.begin_step()
        for _ in range(count):
            assessment.add(estimate_for(name))
        return assessment.finish_listening()

    def test_full_run(self):
        assessment = ScaleAssessment(steps=6, min_notes=5)
        for name in ["D4", "E4", "F#4", "G4", "A4", "B4"]:
            detected = self.play(assessment, name)
            self.assertEqual(detected.note, name)
            assessment.confirm()

        self.assertTrue(assessment.complete)
        result = assessment.finish()
        self.assertEqual(result.scale, ["D4", "E4", "F#4", "G4", "A4", "B4"])
        self.assertEqual(result.root, "D")

    def test_retry_discards_pending(self):
        assessment = ScaleAssessment(steps=2, min_notes=1)
        self.play(assessment, "C5")
        assessment.retry()
        self.assertEqual(assessment.phase, ScaleAssessment.LISTENING)
        assessment.add(estimate_for("D5"))
        self.assertEqual(assessment.finish_listening().note, "D5")
        assessment.confirm()
        self.assertEqual(assessment.step, 1)

    def test_skip(self):
        assessment = ScaleAssessment(steps=3, min_notes=2)
        assessment.skip()
        self.play(assessment, "G4")
        assessment.confirm()
        self.play(assessment, "A4")
        assessment.confirm()
        self.assertEqual(assessment.notes[0].note, "—")
        self.assertTrue(assessment.notes[0].skipped)
        self.assertEqual(assessment.finish().root, "G")

    def test_too_few_notes(self):
        assessment = ScaleAssessment(steps=2, min_notes=2)
        assessment.skip()
        self.play(assessment, "G4")
        assessment.confirm()
        with self.assertRaises(ValueError):
            assessment.finish()

    def test_nothing_detected(self):
        assessment = ScaleAssessment(steps=2, min_notes=1)
        assessment.begin_step()
        assessment.add(None)
        self.assertIsNone(assessment.finish_listening())
        with self.assertRaises(ValueError):
            assessment.confirm()

    def test_estimates_ignored_when_not_listening(self):
        assessment = ScaleAssessment(steps=1, min_notes=1)
        assessment.add(estimate_for("G4"))
        assessment.begin_step()
        self.assertIsNone(assessment.finish_listening())

    def test_no_steps_after_completion(self):
        assessment = ScaleAssessment(steps=1, min_notes=1)
        assessment.skip()
        with self.assertRaises(ValueError):
            assessment.begin_step()
        with self.assertRaises(ValueError):
            assessment.skip()

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            ScaleAssessment(steps=0)
        with self.assertRaises(ValueError):
            ScaleAssessment(steps=3, min_notes=4)


class TestHoldTracker(unittest.TestCase):
    def test_hold_completes(self):
        tracker = HoldTracker(hold_required=0.5)
        good = MatchResult(match=True, accuracy=90.0, cents=5)
        self.assertFalse(tracker.update(good, 0.0).complete)

        status = tracker.update(good, 0.25)
        self.assertTrue(status.holding)
        self.assertAlmostEqual(status.progress, 50.0)

        status = tracker.update(good, 0.5)
        self.assertTrue(status.complete)
        self.assertEqual(status.progress, 100.0)

    def test_miss_resets(self):
        tracker = HoldTracker(hold_required=0.5)
        good = MatchResult(match=True, accuracy=90.0, cents=5)
        tracker.update(good, 0.0)
        status = tracker.update(MatchResult(match=False, accuracy=0.0), 0.3)
        self.assertFalse(status.holding)
        self.assertEqual(tracker.update(good, 0.4).progress, 0.0)

    def test_low_accuracy_rejects_after_enough_samples(self):
        tracker = HoldTracker(hold_required=2.0, min_note_accuracy=60.0)
        poor = MatchResult(match=True, accuracy=30.0, cents=35)
        for i in range(5):
            self.assertTrue(tracker.update(poor, i * 0.1).holding)
        status = tracker.update(poor, 0.5)
        self.assertFalse(status.holding)
        self.assertEqual(status.accuracy, 30.0)

    def test_hold_required_is_clamped(self):
        self.assertEqual(HoldTracker(hold_required=0.1).hold_required, 0.3)
        self.assertEqual(HoldTracker(hold_required=5.0).hold_required, 2.0)


if __name__ == "__main__":
    unittest.main()
