"""Autocorrelation pitch extraction for a single analysis window."""

import numpy as np

NO_PITCH = -1.0

# A lag qualifies once its correlation rises above this value
CORRELATION_THRESHOLD = 0.9
# Best correlation needed to report an uninterpolated period
FALLBACK_CORRELATION = 0.01


def rms(samples: np.ndarray) -> float:
    """Root-mean-square level of a block of samples (0.0 for an empty block)."""
    if len(samples) == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(samples, dtype=np.float64))))


def auto_correlate(samples: np.ndarray, sample_rate: float) -> float:
    """Estimate the fundamental frequency of ``samples`` in Hz.

    The first half of the buffer is compared against copies of itself shifted
    by every lag in ``[0, len // 2)`` using a mean absolute difference. The
    first lag where the correlation climbs above CORRELATION_THRESHOLD marks
    the start of the fundamental's peak; the highest lag in that rising run is
    refined with a parabolic-style shift as soon as the correlation falls
    again. Harmonic and sub-harmonic peaks later in the lag range are never
    considered.

    Returns:
        Frequency in Hz, or NO_PITCH when no periodicity was found
    """
    buffer = np.asarray(samples, dtype=np.float64)
    max_samples = len(buffer) // 2
    if max_samples < 2:
        return NO_PITCH

    head = buffer[:max_samples]
    correlations = np.zeros(max_samples)
    best_offset = -1
    best_correlation = 0.0
    found_good_correlation = False
    last_correlation = 1.0

    for offset in range(max_samples):
        distance = np.abs(head - buffer[offset : offset + max_samples]).sum()
        correlation = 1.0 - float(distance) / max_samples
        correlations[offset] = correlation

        if correlation > CORRELATION_THRESHOLD and correlation > last_correlation:
            found_good_correlation = True
            if correlation > best_correlation:
                best_correlation = correlation
                best_offset = offset
        elif found_good_correlation:
            # best_offset + 1 == offset here, and best_offset >= 1 since lag 0
            # can never rise above the initial last_correlation of 1.0
            shift = (
                correlations[best_offset + 1] - correlations[best_offset - 1]
            ) / correlations[best_offset]
            return sample_rate / (best_offset + 8 * shift)
        last_correlation = correlation

    if best_correlation > FALLBACK_CORRELATION:
        return sample_rate / best_offset
    return NO_PITCH
