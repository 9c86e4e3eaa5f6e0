"""Assembly of one lesson segment's audio and fragment timings."""
import glob
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import aiofiles

from ..config.tts import DEFAULT_RATES
from ..exceptions import LessonSyncError, SynthesisError
from ..models.enums import LanguageTag
from ..models.fragment import SegmentScript, TextFragment
from ..models.timing import FragmentTiming, SegmentAudioResult
from ..ports.audio_processor import AudioConcatenator, DurationProbe
from ..ports.tts_service import SpeechSynthesizer
from .duration import measure_duration
from .fragment_merger import FragmentMerger

logger = logging.getLogger(__name__)


class SegmentAudioAssembler:
    """Produces one audio file and its fragment timings for a segment.

    Fragments are merged, synthesized one at a time in script order and,
    when more than one remains, joined into the segment file. Each
    fragment's offset is the cumulative duration of the fragments before
    it. The segment duration is probed on the final file rather than
    summed.
    """

    def __init__(
        self,
        synthesizer: SpeechSynthesizer,
        probe: DurationProbe,
        concatenator: AudioConcatenator,
        merger: Optional[FragmentMerger] = None,
        default_rates: Optional[Dict[LanguageTag, float]] = None,
        audio_extension: str = "wav",
        duration_tolerance: float = 0.01,
    ) -> None:
        self.synthesizer = synthesizer
        self.probe = probe
        self.concatenator = concatenator
        self.merger = merger or FragmentMerger()
        self.default_rates = dict(DEFAULT_RATES)
        if default_rates:
            self.default_rates.update(default_rates)
        self.audio_extension = audio_extension.lstrip(".")
        self.duration_tolerance = duration_tolerance

    def effective_rate(self, fragment: TextFragment) -> float:
        if fragment.synthesis_rate is not None:
            return fragment.synthesis_rate
        return self.default_rates.get(fragment.language_tag, 1.0)

    def segment_path(self, segment_id: str, output_dir: Union[str, Path]) -> Path:
        return Path(output_dir) / f"{segment_id}.{self.audio_extension}"

    def part_path(self, segment_id: str, index: int, output_dir: Union[str, Path]) -> Path:
        return Path(output_dir) / f"{segment_id}_part_{index}.{self.audio_extension}"

    async def assemble(self, segment: SegmentScript, output_dir: Union[str, Path]) -> SegmentAudioResult:
        """Synthesize a segment into ``{output_dir}/{segment_id}.{ext}``.

        Raises:
            SynthesisError: If synthesis fails or yields no audio
            ConcatenationError: If the fragment files cannot be joined
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        final_path = self.segment_path(segment.id, output_dir)

        fragments = self.merger.merge(segment.fragments)
        logger.info(
            "Assembling segment '%s': %d fragment(s) (%d after merging)",
            segment.id, len(segment.fragments), len(fragments),
        )

        succeeded = False
        try:
            if len(fragments) == 1:
                result = await self._assemble_single(segment.id, fragments[0], final_path)
            else:
                result = await self._assemble_multiple(segment.id, fragments, output_dir, final_path)
            succeeded = True
            return result
        except LessonSyncError:
            raise
        except Exception as e:
            raise SynthesisError(
                f"Unexpected error assembling segment '{segment.id}': {e}",
                details={"segment_id": segment.id},
                cause=e,
            ) from e
        finally:
            self._cleanup(segment.id, output_dir)
            if not succeeded and final_path.exists():
                logger.debug("Removing partial segment file %s", final_path)
                final_path.unlink()

    async def _assemble_single(
        self, segment_id: str, fragment: TextFragment, final_path: Path
    ) -> SegmentAudioResult:
        await self._synthesize_to_file(fragment, final_path)
        duration = await measure_duration(self.probe, final_path)
        timing = FragmentTiming(
            content=fragment.content,
            language_tag=fragment.language_tag,
            duration=duration,
            start_offset=0.0,
            end_offset=duration,
            auxiliary_translation=fragment.auxiliary_translation,
        )
        logger.info("Segment '%s' synthesized directly (%.3fs)", segment_id, duration)
        return SegmentAudioResult(
            audio_artifact_path=final_path,
            duration=duration,
            fragment_timings=[timing],
        )

    async def _assemble_multiple(
        self,
        segment_id: str,
        fragments: List[TextFragment],
        output_dir: Path,
        final_path: Path,
    ) -> SegmentAudioResult:
        part_files: List[Path] = []
        timings: List[FragmentTiming] = []
        cursor = 0.0

        for index, fragment in enumerate(fragments):
            part_path = self.part_path(segment_id, index, output_dir)
            await self._synthesize_to_file(fragment, part_path)
            if not part_path.exists() or part_path.stat().st_size == 0:
                raise SynthesisError(
                    f"Fragment {index} of segment '{segment_id}' produced no audio file",
                    details={"segment_id": segment_id, "fragment_index": index},
                )

            duration = await measure_duration(self.probe, part_path)
            timings.append(FragmentTiming(
                content=fragment.content,
                language_tag=fragment.language_tag,
                duration=duration,
                start_offset=cursor,
                end_offset=cursor + duration,
                auxiliary_translation=fragment.auxiliary_translation,
            ))
            cursor += duration
            part_files.append(part_path)
            logger.info(
                "Fragment %d/%d of '%s' [%s]: %.3fs",
                index + 1, len(fragments), segment_id, fragment.language_tag.value, duration,
            )

        await self.concatenator.concatenate(part_files, final_path)
        total = await measure_duration(self.probe, final_path)

        drift = abs(total - cursor)
        if drift > self.duration_tolerance:
            logger.warning(
                "Segment '%s' duration %.3fs differs from fragment sum %.3fs by %.3fs",
                segment_id, total, cursor, drift,
            )

        logger.info("Segment '%s' joined from %d fragments (%.3fs)", segment_id, len(part_files), total)
        return SegmentAudioResult(
            audio_artifact_path=final_path,
            duration=total,
            fragment_timings=timings,
        )

    async def _synthesize_to_file(self, fragment: TextFragment, path: Path) -> None:
        rate = self.effective_rate(fragment)
        audio = await self.synthesizer.synthesize(fragment.content, fragment.language_tag, rate)
        if not audio:
            raise SynthesisError(
                f"{self.synthesizer.name} returned no audio for {fragment.content!r}",
                details={"language": fragment.language_tag.value, "rate": rate},
            )
        async with aiofiles.open(path, 'wb') as f:
            await f.write(audio)

    def _cleanup(self, segment_id: str, output_dir: Path) -> None:
        for part in output_dir.glob(f"{glob.escape(segment_id)}_part_*"):
            try:
                part.unlink()
            except FileNotFoundError:
                pass
