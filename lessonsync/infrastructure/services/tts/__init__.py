"""Speech synthesis adapters.

The Google synthesizer is imported from its module directly so that
google-cloud-texttospeech stays optional.
"""
from .edge_tts_service import EdgeSpeechSynthesizer

__all__ = ['EdgeSpeechSynthesizer']
