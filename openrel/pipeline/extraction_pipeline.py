"""End-to-end sentence extraction pipeline.

This module orchestrates the complete extraction workflow:
1. Reading sentences from files or standard input (optionally segmenting prose)
2. Grouping sentences into batches for parallel execution
3. Parsing, extraction and confidence scoring per sentence
4. Filtering, ranking and rendering extractions to a single output stream
"""

import io
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO

from loguru import logger

from openrel.errors import InputEncodingError, SentenceProcessingError
from openrel.extraction.models import ScoredExtraction
from openrel.interfaces import ConfidenceScorer, Extractor, Parser, Segmenter
from openrel.parsing.graph import DependencyGraph
from openrel.parsing.segmenter import segment_lines
from openrel.pipeline.output_formats import NO_EXTRACTIONS, OutputFormat
from openrel.utils.config import RunSettings

# Number of sentences dispatched together in parallel mode.
CHUNK_SIZE = 10_000
PROMPT = "> "


@dataclass(frozen=True)
class SentenceOutcome:
    """Result of processing one sentence: lines written, or the failure."""

    sentence: str
    lines_written: int = 0
    extractions_found: int = 0
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.error is None


def rank_extractions(scored: Iterable[ScoredExtraction], threshold: float) -> List[ScoredExtraction]:
    """Drop extractions below ``threshold`` and order by descending confidence.

    The sort is stable, so equal confidences keep extractor order.
    """
    kept = [item for item in scored if item.confidence >= threshold]
    return sorted(kept, key=lambda item: -item.confidence)


def batched(items: Iterable[str], size: int) -> Iterator[List[str]]:
    iterator = iter(items)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


def decoded_lines(lines: Iterable[str], encoding: str, source: str) -> Iterator[str]:
    """Strip line terminators and turn decode failures into InputEncodingError."""
    iterator = iter(lines)
    while True:
        try:
            line = next(iterator)
        except StopIteration:
            return
        except UnicodeDecodeError as exc:
            raise InputEncodingError(encoding, source, exc) from exc
        yield line.rstrip("\r\n")


class ExtractionPipeline:
    """Runs parser, extractor and scorer over every input sentence.

    Components that are not passed in are loaded from ``settings`` by
    :meth:`initialize_components`. Output goes to ``settings.output_file`` or
    standard output unless ``output_stream`` is given; the interactive prompt
    always goes to ``prompt_stream`` (standard output by default).

    Example:
        >>> pipeline = ExtractionPipeline(settings)
        >>> pipeline.run()
        0
    """

    def __init__(
        self,
        settings: RunSettings,
        *,
        parser: Optional[Parser] = None,
        extractor: Optional[Extractor] = None,
        scorer: Optional[ConfidenceScorer] = None,
        segmenter: Optional[Segmenter] = None,
        output_stream: Optional[TextIO] = None,
        prompt_stream: Optional[TextIO] = None,
    ) -> None:
        self.settings = settings
        self.parser = parser
        self.extractor = extractor
        self.scorer = scorer
        self.segmenter = segmenter

        self._output_stream = output_stream
        self._prompt_stream = prompt_stream
        self._writer: Optional[TextIO] = None
        self._write_lock = threading.Lock()
        self._initialized = False

        self.stats: Dict[str, Any] = {
            "sources_processed": 0,
            "sentences_processed": 0,
            "sentences_failed": 0,
            "extractions_found": 0,
            "lines_written": 0,
            "total_processing_time": 0.0,
        }

    def initialize_components(self) -> None:
        """Load every component the settings ask for and that was not injected.

        Components the settings rule out are dropped, so per-sentence code only
        checks for ``None``.
        """
        settings = self.settings

        if not settings.parse_input:
            self.parser = None
        elif self.parser is None:
            from openrel.parsing.parser import SpacyDependencyParser

            start = time.time()
            self.parser = SpacyDependencyParser(settings.parser_model)
            logger.info(f"Loaded parser model {settings.parser_model} in {time.time() - start:.3f}s")

        if self.extractor is None:
            from openrel.extraction.dependency_extractor import DependencyPatternExtractor

            start = time.time()
            self.extractor = DependencyPatternExtractor(
                settings.model_path, threshold=settings.extractor_threshold
            )
            logger.info(f"Loaded extraction model in {time.time() - start:.3f}s")

        if settings.confidence_model_path is None:
            self.scorer = None
        elif self.scorer is None:
            from openrel.extraction.confidence import LogisticConfidenceScorer

            start = time.time()
            self.scorer = LogisticConfidenceScorer.from_yaml(settings.confidence_model_path)
            logger.info(f"Loaded confidence model in {time.time() - start:.3f}s")

        if not settings.split_input:
            self.segmenter = None
            if settings.input_files is not None:
                logger.warning(
                    "Each line is expected to be a unique sentence. "
                    "Restart with --split to segment prose into sentences."
                )
        elif self.segmenter is None:
            from openrel.parsing.segmenter import SpacySentenceSegmenter

            self.segmenter = SpacySentenceSegmenter()
            logger.info("Prose input will be split into sentences")

        self._initialized = True
        logger.debug("All pipeline components initialized")

    def run(self) -> int:
        """Process every configured source and return the exit status."""
        self.settings.validate_settings()
        if not self._initialized:
            self.initialize_components()

        start_time = time.time()
        files = self.settings.input_files
        try:
            with self._open_output() as writer:
                self._writer = writer
                header = self.settings.output_format.header
                if header is not None:
                    self._emit(header)

                if files is None:
                    logger.info("Running extractor on standard input...")
                    with self._open_stdin() as stdin:
                        self.process_source(stdin, source="<stdin>")
                elif len(files) == 1:
                    logger.info(f"Running extractor on {files[0]}...")
                    self._process_file(files[0])
                else:
                    logger.info("Running extractor on multiple files...")
                    for i, path in enumerate(files, 1):
                        logger.info(f"Processing file {path} ({i}/{len(files)})...")
                        self._process_file(path)
                    logger.info(f"All files completed in {time.time() - start_time:.3f} seconds")
        finally:
            self._writer = None
            self.stats["total_processing_time"] += time.time() - start_time

        for key, value in self.get_statistics().items():
            logger.debug(f"  {key}: {value}")
        return 0

    def process_source(self, lines: Iterable[str], *, source: str = "<input>") -> None:
        """Process one source of lines, in order, against the open writer."""
        if self._writer is None:
            raise RuntimeError("process_source() requires an open output; use run()")

        start = time.time()
        interactive = self.settings.interactive_input
        if interactive:
            self._prompt()

        sentences = self._sentences(decoded_lines(lines, self.settings.encoding, source))
        if self.settings.parallel:
            with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
                for batch in batched(sentences, CHUNK_SIZE):
                    # list() waits for the whole batch before the next is read.
                    for outcome in list(executor.map(self.process_sentence, batch)):
                        self._settle(outcome)
                    if interactive:
                        self._prompt()
        else:
            for sentence in sentences:
                self._settle(self.process_sentence(sentence))
                if interactive:
                    self._prompt()

        self.stats["sources_processed"] += 1
        logger.info(f"Completed {source} in {time.time() - start:.3f} seconds")

    def process_sentence(self, sentence: str) -> SentenceOutcome:
        """Extract from one sentence and write its lines.

        Failures are returned rather than raised; :meth:`_settle` applies the
        run's error policy.
        """
        try:
            found, written = self._extract_and_write(sentence)
        except Exception as exc:  # noqa: BLE001
            return SentenceOutcome(sentence=sentence, error=exc)
        return SentenceOutcome(sentence=sentence, lines_written=written, extractions_found=found)

    def score_extractions(self, graph: DependencyGraph) -> List[ScoredExtraction]:
        """Run the extractor and attach a confidence to each candidate.

        Without a scorer every candidate gets 0.0.
        """
        assert self.extractor is not None
        scorer = self.scorer
        return [
            ScoredExtraction(
                confidence=scorer.score(candidate) if scorer is not None else 0.0,
                candidate=candidate,
            )
            for candidate in self.extractor.extract(graph)
        ]

    def get_statistics(self) -> Dict[str, Any]:
        return dict(self.stats)

    def _extract_and_write(self, sentence: str) -> tuple[int, int]:
        output_format = self.settings.output_format
        interactive = output_format is OutputFormat.INTERACTIVE

        if interactive:
            self._emit(sentence)

        if self.parser is not None:
            graph = self.parser.parse(sentence)
        else:
            graph = DependencyGraph.deserialize(sentence)

        scored = self.score_extractions(graph)
        written = 0
        if not scored:
            if interactive:
                self._emit(NO_EXTRACTIONS)
        else:
            for item in rank_extractions(scored, self.settings.confidence_threshold):
                self._emit(output_format.format(item.confidence, item.candidate))
                written += 1

        if interactive:
            self._emit("")

        return len(scored), written

    def _settle(self, outcome: SentenceOutcome) -> None:
        self.stats["sentences_processed"] += 1
        if outcome.error is None:
            self.stats["extractions_found"] += outcome.extractions_found
            self.stats["lines_written"] += outcome.lines_written
            return

        self.stats["sentences_failed"] += 1
        if not self.settings.invincible:
            raise SentenceProcessingError(outcome.sentence, outcome.error) from outcome.error
        logger.opt(exception=outcome.error).error(
            "Skipping sentence after error: {}", outcome.error
        )

    def _sentences(self, lines: Iterable[str]) -> Iterator[str]:
        if self.segmenter is not None:
            lines = segment_lines(lines, self.segmenter)
        return (line for line in lines if line)

    def _emit(self, line: str) -> None:
        writer = self._writer
        assert writer is not None
        with self._write_lock:
            writer.write(line + "\n")
            writer.flush()

    def _prompt(self) -> None:
        stream = self._prompt_stream or sys.stdout
        stream.write(PROMPT)
        stream.flush()

    def _process_file(self, path: Path) -> None:
        with open(path, encoding=self.settings.encoding) as source:
            self.process_source(source, source=str(path))

    @contextmanager
    def _open_stdin(self) -> Iterator[TextIO]:
        buffer = getattr(sys.stdin, "buffer", None)
        if buffer is None:
            yield sys.stdin
            return
        stdin = io.TextIOWrapper(buffer, encoding=self.settings.encoding)
        try:
            yield stdin
        finally:
            stdin.detach()

    @contextmanager
    def _open_output(self) -> Iterator[TextIO]:
        if self._output_stream is not None:
            try:
                yield self._output_stream
            finally:
                self._output_stream.flush()
        elif self.settings.output_file is not None:
            with open(self.settings.output_file, "w", encoding=self.settings.encoding) as output:
                yield output
        else:
            buffer = getattr(sys.stdout, "buffer", None)
            if buffer is None:
                try:
                    yield sys.stdout
                finally:
                    sys.stdout.flush()
                return
            sys.stdout.flush()
            output = io.TextIOWrapper(buffer, encoding=self.settings.encoding)
            try:
                yield output
            finally:
                output.flush()
                # Leave sys.stdout usable.
                output.detach()
