"""Pipeline orchestration and output rendering.

``ExtractionPipeline`` lives in :mod:`openrel.pipeline.extraction_pipeline`; it is
not re-exported here because run settings import the output formats.
"""

from openrel.pipeline.output_formats import OutputFormat

__all__ = ["OutputFormat"]
