"""Interfaces for audio measurement and joining."""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence, Union


class DurationProbe(ABC):
    """Measures the exact duration of an audio file."""

    @abstractmethod
    async def probe_duration(self, audio_file: Union[str, Path]) -> float:
        """Get the duration of an audio file in seconds.

        Args:
            audio_file: Path to the audio file

        Returns:
            Duration in seconds as a float

        Raises:
            ProbeError: If the duration cannot be measured
        """
        ...


class AudioConcatenator(ABC):
    """Joins ordered audio files into one file."""

    @abstractmethod
    async def concatenate(
        self,
        input_files: Sequence[Union[str, Path]],
        output_file: Union[str, Path],
    ) -> Path:
        """Concatenate audio files in order.

        A lossless join is attempted first. If it fails, exactly one
        re-encoding join is attempted before giving up.

        Args:
            input_files: Ordered input file paths
            output_file: Output file path

        Returns:
            Path to the output file

        Raises:
            ConcatenationError: If both the lossless and the re-encoding join fail
        """
        ...
