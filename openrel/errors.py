"""Exception hierarchy for the extraction pipeline."""

from __future__ import annotations

ENCODING_HELP = (
    "The input could not be decoded with the configured character encoding. "
    "This usually means there is a mismatch between what openrel expects and the "
    "input file. Try converting the input file to UTF-8 or specify the correct "
    "character encoding with '--encoding'."
)


class OpenRelError(Exception):
    """Base class for all openrel errors."""


class ConfigurationError(OpenRelError):
    """Invalid or incompatible run configuration; raised before any processing."""


class InputEncodingError(OpenRelError):
    """An input stream could not be decoded under the configured encoding."""

    def __init__(self, encoding: str, source: str, cause: UnicodeDecodeError) -> None:
        self.encoding = encoding
        self.source = source
        self.cause = cause
        super().__init__(f"Cannot decode {source} as {encoding}: {cause}")

    @property
    def help_message(self) -> str:
        return ENCODING_HELP


class GraphFormatError(OpenRelError):
    """A serialized dependency graph could not be read."""


class SentenceProcessingError(OpenRelError):
    """Parsing, extraction, scoring or rendering failed for a single sentence."""

    def __init__(self, sentence: str, cause: BaseException) -> None:
        self.sentence = sentence
        self.cause = cause
        preview = sentence if len(sentence) <= 80 else sentence[:77] + "..."
        super().__init__(f"Failed to process sentence {preview!r}: {cause}")
