# File: uvg/generator.py
"""
uvg - Generation Pipeline (Orchestrator)
========================================
Connects the phases together:

    Schema dump → IntrospectedSchema → Validation → Generator → text

Workflow::

    1. Load a JSON/YAML dump (or accept an in-memory schema).
    2. Optionally narrow it to some schemas / tables / no views.
    3. Run the non-fatal validators and log their findings.
    4. Render the module with the selected generator.
    5. Return a ``GenerationReport`` with the text and metrics.

Writing the text anywhere is left to the caller (see ``uvg.cli``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from uvg.codegen import Generator, GeneratorKind, get_generator
from uvg.loader import load_schema
from uvg.models import GeneratorOptions, IntrospectedSchema
from uvg.utils import Timer, count_lines
from uvg.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """Result of one ``ModelGenerator`` run."""

    output: str = ""
    generator: str = ""
    table_count: int = 0
    line_count: int = 0
    elapsed_seconds: float = 0.0
    validation: ValidationResult = field(default_factory=ValidationResult)

    @property
    def validation_warnings(self) -> List[str]:
        return [str(issue) for issue in self.validation.warnings]

    def summary(self, include_info: bool = False) -> str:
        """Return a human-readable summary string.

        Validation findings are appended when there are warnings, or any
        finding at all with *include_info*.
        """
        lines: List[str] = []
        lines.append(f"{'='*60}")
        lines.append("  uvg - Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Generator:        {self.generator}")
        lines.append(f"  Tables:           {self.table_count}")
        lines.append(f"  Lines generated:  {self.line_count:,}")
        lines.append(f"  Total time:       {self.elapsed_seconds:.3f}s")

        if self.validation.has_warnings or (include_info and len(self.validation)):
            lines.append(f"{'─'*60}")
            lines.append(self.validation.format_report(include_info=include_info))

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# ModelGenerator - orchestrator
# ---------------------------------------------------------------------------


class ModelGenerator:
    """
    Pipeline orchestrator.

    Usage::

        generator = ModelGenerator("tables", GeneratorOptions.parse("noindexes"))

        report = generator.generate_from_file(Path("schema.yaml"))
        print(report.output)

    The generator identifier is checked here, before any schema is read;
    an unknown one raises ``UnknownGeneratorError``.  Instances are
    reusable.
    """

    def __init__(
        self,
        generator: Union[str, GeneratorKind] = GeneratorKind.DECLARATIVE,
        options: Optional[GeneratorOptions] = None,
    ) -> None:
        self._generator: Generator = get_generator(generator)
        self._options: GeneratorOptions = options or GeneratorOptions()

        logger.debug(
            "ModelGenerator initialised: generator=%s, options=%r.",
            self._generator.kind.value,
            self._options,
        )

    @property
    def kind(self) -> GeneratorKind:
        return self._generator.kind

    @property
    def options(self) -> GeneratorOptions:
        return self._options

    # -----------------------------------------------------------------
    # Public: generate from file
    # -----------------------------------------------------------------

    def generate_from_file(
        self,
        schema_path: Path,
        *,
        schemas: Optional[Sequence[str]] = None,
        tables: Optional[Sequence[str]] = None,
        noviews: bool = False,
    ) -> GenerationReport:
        """
        Load a dump, narrow it and generate.

        Raises:
            FileNotFoundError: If the dump doesn't exist.
            ValueError: If the dump can't be parsed or validated.
        """
        with Timer("load_schema") as t_load:
            schema: IntrospectedSchema = load_schema(schema_path)
        logger.info(
            "Loaded %s: %d tables in %.3fs.",
            schema_path,
            schema.table_count,
            t_load.elapsed,
        )

        if schemas or tables or noviews:
            schema = schema.filter(schemas=schemas, tables=tables, noviews=noviews)
            logger.info("After filtering: %d tables.", schema.table_count)

        return self.generate(schema)

    # -----------------------------------------------------------------
    # Public: generate from in-memory schema
    # -----------------------------------------------------------------

    def generate(self, schema: IntrospectedSchema) -> GenerationReport:
        """Validate and render *schema*."""
        report: GenerationReport = GenerationReport(
            generator=self._generator.kind.value,
            table_count=schema.table_count,
        )

        with Timer("generation") as t:
            report.validation = validate_full(schema)
            for issue in report.validation.warnings:
                logger.warning("  ⚠ %s", issue)

            report.output = self._generator.generate(schema, self._options)

        report.line_count = count_lines(report.output)
        report.elapsed_seconds = t.elapsed

        logger.info(
            "Generated %d lines for %d tables with %s in %.3fs.",
            report.line_count,
            report.table_count,
            report.generator,
            t.elapsed,
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ModelGenerator",
    "GenerationReport",
]
