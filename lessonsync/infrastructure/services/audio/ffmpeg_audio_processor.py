"""FFmpeg-backed duration probing and audio joining."""
import asyncio
import logging
import math
import os
import tempfile
from pathlib import Path
from typing import List, Sequence, Union

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError, CouldntEncodeError
from pydub.utils import mediainfo

from lessonsync.core.exceptions import ConcatenationError, ProbeError
from lessonsync.core.ports.audio_processor import AudioConcatenator, DurationProbe

logger = logging.getLogger(__name__)

# pydub sample width (bytes) -> ffmpeg sample format
SAMPLE_FORMATS = {
    1: 'u8',
    2: 's16',
    4: 's32',
}


class FFmpegAudioProcessor(DurationProbe, AudioConcatenator):
    """Measures and joins audio files with ffmpeg.

    Durations come from ffprobe through pydub. Files are joined with the
    ffmpeg concat demuxer without re-encoding; if that fails the inputs are
    decoded with pydub and re-encoded once at a fixed sample format.
    """

    def __init__(
        self,
        ffmpeg_binary: str = "ffmpeg",
        sample_rate: int = 24000,
        channels: int = 1,
        sample_width: int = 2,
    ) -> None:
        self.ffmpeg_binary = ffmpeg_binary
        self.sample_rate = sample_rate
        self.channels = channels
        self.sample_width = sample_width

    async def probe_duration(self, audio_file: Union[str, Path]) -> float:
        path = Path(audio_file)
        if not path.exists() or path.stat().st_size == 0:
            raise ProbeError(f"Audio file is missing or empty: {path}", details={"path": str(path)})

        loop = asyncio.get_running_loop()
        try:
            info = await loop.run_in_executor(None, mediainfo, str(path))
        except (OSError, ValueError) as e:
            raise ProbeError(f"ffprobe failed for {path}: {e}", details={"path": str(path)}, cause=e) from e

        raw_duration = info.get('duration') if info else None
        try:
            duration = float(raw_duration)
        except (TypeError, ValueError) as e:
            raise ProbeError(
                f"ffprobe reported no duration for {path}",
                details={"path": str(path), "duration": raw_duration},
                cause=e,
            ) from e
        if not math.isfinite(duration) or duration < 0:
            raise ProbeError(f"ffprobe reported invalid duration {raw_duration!r} for {path}")

        logger.debug("Probed %s: %.3fs", path, duration)
        return duration

    async def concatenate(
        self,
        input_files: Sequence[Union[str, Path]],
        output_file: Union[str, Path],
    ) -> Path:
        if not input_files:
            raise ConcatenationError("No input files provided for concatenation")

        inputs = [Path(f) for f in input_files]
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            await self._stream_copy_join(inputs, output_path)
            logger.debug("Joined %d files into %s without re-encoding", len(inputs), output_path)
            return output_path
        except ConcatenationError as e:
            logger.warning("Lossless join into %s failed, re-encoding: %s", output_path, e.message)
            self._remove_partial(output_path)

        try:
            await self._reencode_join(inputs, output_path)
        except ConcatenationError:
            self._remove_partial(output_path)
            raise
        logger.info("Joined %d files into %s by re-encoding", len(inputs), output_path)
        return output_path

    async def _stream_copy_join(self, inputs: List[Path], output_path: Path) -> None:
        """Join files with the ffmpeg concat demuxer (``-c copy``)."""
        fd, list_name = tempfile.mkstemp(prefix=f".{output_path.stem}_", suffix=".txt", dir=output_path.parent)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                for path in inputs:
                    safe_path = str(path.resolve()).replace("'", "'\\''")
                    f.write(f"file '{safe_path}'\n")

            cmd = [
                self.ffmpeg_binary, "-y", "-hide_banner", "-loglevel", "error",
                "-f", "concat", "-safe", "0",
                "-i", list_name,
                "-c", "copy",
                str(output_path),
            ]
            try:
                proc = await asyncio.create_subprocess_exec(
                    *cmd,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as e:
                raise ConcatenationError(f"Could not run {self.ffmpeg_binary}: {e}", cause=e) from e
            _, stderr = await proc.communicate()

            if proc.returncode != 0:
                error_msg = stderr.decode(errors='replace').strip() if stderr else "unknown error"
                raise ConcatenationError(
                    f"ffmpeg exited with code {proc.returncode}: {error_msg}",
                    details={"returncode": proc.returncode},
                )
            if not output_path.exists() or output_path.stat().st_size == 0:
                raise ConcatenationError(f"ffmpeg produced no output at {output_path}")
        finally:
            if os.path.exists(list_name):
                os.remove(list_name)

    async def _reencode_join(self, inputs: List[Path], output_path: Path) -> None:
        """Decode every input and export one file at the configured sample format."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._reencode_join_sync, inputs, output_path)

    def _reencode_join_sync(self, inputs: List[Path], output_path: Path) -> None:
        output_format = output_path.suffix.lstrip('.') or 'wav'
        try:
            combined = AudioSegment.empty()
            for path in inputs:
                segment = AudioSegment.from_file(str(path))
                combined += (
                    segment.set_frame_rate(self.sample_rate)
                    .set_channels(self.channels)
                    .set_sample_width(self.sample_width)
                )
            combined.export(
                str(output_path),
                format=output_format,
                parameters=[
                    "-ar", str(self.sample_rate),
                    "-ac", str(self.channels),
                    "-sample_fmt", SAMPLE_FORMATS.get(self.sample_width, 's16'),
                ],
            )
        except (CouldntDecodeError, CouldntEncodeError, OSError, IndexError) as e:
            raise ConcatenationError(f"Re-encoding join into {output_path} failed: {e}", cause=e) from e

        if not output_path.exists() or output_path.stat().st_size == 0:
            raise ConcatenationError(f"Re-encoding produced no output at {output_path}")

    @staticmethod
    def _remove_partial(output_path: Path) -> None:
        if output_path.exists():
            logger.debug("Removing partial output %s", output_path)
            output_path.unlink()
