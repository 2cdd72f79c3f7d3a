"""Transcript normalization: correction and dictionary-verified word merging."""

from voxaurora.text.corrector import LanguageToolCorrector, apply_replacements
from voxaurora.text.dictionary import Dictionary, load_dictionary, parse_hunspell_dic
from voxaurora.text.normalizer import TranscriptNormalizer, merge_pass, merge_split_words

__all__ = [
    "Dictionary",
    "LanguageToolCorrector",
    "TranscriptNormalizer",
    "apply_replacements",
    "load_dictionary",
    "merge_pass",
    "merge_split_words",
    "parse_hunspell_dic",
]
