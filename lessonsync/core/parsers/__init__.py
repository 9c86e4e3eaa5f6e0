"""Parsers for lesson input files."""
from .script_parser import load_segment_scripts, parse_segment, parse_segment_scripts

__all__ = ['load_segment_scripts', 'parse_segment', 'parse_segment_scripts']
