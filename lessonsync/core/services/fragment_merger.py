"""Merging of pathologically short text fragments before synthesis."""
import logging
from typing import List, Optional, Sequence

from ..models.fragment import TextFragment

logger = logging.getLogger(__name__)

DEFAULT_MIN_LENGTH = 3


def _join_translations(first: Optional[str], second: Optional[str]) -> Optional[str]:
    if first and second:
        return first + second
    return first or second


class FragmentMerger:
    """Collapses very short fragments into a neighbouring fragment of the same language.

    Fragments such as bare punctuation or connectors synthesize badly on
    their own. A fragment whose stripped content is shorter than
    ``min_length`` is merged into the previously emitted fragment when that
    one has the same language, otherwise into the next fragment when that
    one has the same language. A short fragment with no same-language
    neighbour is kept as it is.
    """

    def __init__(self, min_length: int = DEFAULT_MIN_LENGTH) -> None:
        self.min_length = min_length

    def is_short(self, fragment: TextFragment) -> bool:
        return len(fragment.content.strip()) < self.min_length

    def merge(self, fragments: Sequence[TextFragment]) -> List[TextFragment]:
        """Return a new list of merged fragments; the input is left untouched.

        A forward merge that is still short stays the current fragment, so
        it keeps absorbing same-language followers until it reaches
        ``min_length`` or the run ends. Only fragments with no same-language
        neighbour remain short, which makes a second pass a no-op.
        """
        if len(fragments) <= 1:
            return [fragment.model_copy() for fragment in fragments]

        merged: List[TextFragment] = []
        current: Optional[TextFragment] = None
        i = 0
        while i < len(fragments):
            if current is None:
                current = fragments[i]

            if self.is_short(current):
                previous = merged[-1] if merged else None
                following = fragments[i + 1] if i + 1 < len(fragments) else None

                if previous is not None and previous.language_tag == current.language_tag:
                    merged[-1] = previous.model_copy(update={
                        'content': previous.content + current.content,
                        'auxiliary_translation': _join_translations(
                            previous.auxiliary_translation, current.auxiliary_translation
                        ),
                    })
                    logger.debug("Merged short fragment %r into previous fragment", current.content)
                    current = None
                    i += 1
                    continue

                if following is not None and following.language_tag == current.language_tag:
                    logger.debug("Merged short fragment %r into next fragment", current.content)
                    current = current.model_copy(update={
                        'content': current.content + following.content,
                        'synthesis_rate': current.synthesis_rate or following.synthesis_rate,
                        'auxiliary_translation': _join_translations(
                            current.auxiliary_translation, following.auxiliary_translation
                        ),
                    })
                    i += 1
                    continue

                logger.debug(
                    "Short fragment %r has no %s neighbour, keeping it",
                    current.content, current.language_tag.value,
                )

            merged.append(current.model_copy())
            current = None
            i += 1

        return merged
