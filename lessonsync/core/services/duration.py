"""Audio duration measurement with a deterministic fallback."""
import logging
import os
from pathlib import Path
from typing import Union

from ..exceptions import ProbeError
from ..ports.audio_processor import DurationProbe

logger = logging.getLogger(__name__)

# 24 kHz * 16-bit * mono PCM
PCM_BYTES_PER_SECOND = 48000
MIN_ESTIMATED_DURATION = 1.0
UNREADABLE_FILE_DURATION = 5.0


def estimate_duration_from_size(audio_file: Union[str, Path]) -> float:
    """Estimate a duration from the file size alone.

    Returns ``max(size / 48000, 1.0)`` seconds, or 5 seconds when the file
    cannot be stat'ed.
    """
    try:
        size = os.stat(audio_file).st_size
    except OSError as e:
        logger.warning("Could not stat %s (%s), assuming %.1fs", audio_file, e, UNREADABLE_FILE_DURATION)
        return UNREADABLE_FILE_DURATION
    return max(size / PCM_BYTES_PER_SECOND, MIN_ESTIMATED_DURATION)


async def measure_duration(probe: DurationProbe, audio_file: Union[str, Path]) -> float:
    """Measure a file's duration, falling back to a size estimate if probing fails."""
    try:
        return await probe.probe_duration(audio_file)
    except ProbeError as e:
        estimate = estimate_duration_from_size(audio_file)
        logger.warning(
            "Duration probe failed for %s: %s. Using size estimate of %.3fs",
            audio_file, e.message, estimate,
        )
        return estimate
