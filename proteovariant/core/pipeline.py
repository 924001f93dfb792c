"""
Batch processing of samples.

Loading reads every file of a batch into memory first; processing is then a
synchronous pass over the samples in input order. The first failing sample
aborts the batch.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from proteovariant.core.adapter import SampleContext
from proteovariant.core.classification import PathogenicClassifier
from proteovariant.core.common import (
    SAMPLE_SHEET_ID,
    SAMPLE_SHEET_NAME,
    SAMPLE_SHEET_PEPTIDES,
    SAMPLE_SHEET_PROTEINS,
    SAMPLE_SHEET_REQUIRED,
    SAMPLE_SHEET_SOFTWARE,
)
from proteovariant.core.model import Sample, SampleInput, SourceSoftware
from proteovariant.core.parser import ParsedTable, parse, parse_file, read_text
from proteovariant.core.registry import get_adapter
from proteovariant.core.validation import (
    BatchProcessingError,
    EmptyTableError,
    InvalidSampleConfigError,
    MissingColumnError,
    ProteoVariantError,
    validate_required_columns,
)
from proteovariant.utils.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Loading
# ============================================================================


def load_sample_input(
    sample_id: int,
    name: str,
    software: Union[SourceSoftware, str],
    peptide_path: Union[str, Path],
    protein_path: Optional[Union[str, Path]] = None,
) -> SampleInput:
    """Read the files of one sample into a SampleInput."""
    try:
        if not isinstance(software, SourceSoftware):
            software = SourceSoftware.from_label(software)
    except ValueError as e:
        raise InvalidSampleConfigError(f"Sample '{name}': {e}") from e

    texts = []
    for label, path in (("peptide", peptide_path), ("protein", protein_path)):
        if path is None or str(path) == "":
            texts.append(None)
            continue
        if not Path(path).is_file():
            raise InvalidSampleConfigError(
                f"Sample '{name}': {label} file not found: {path}"
            )
        texts.append(read_text(path))

    logger.debug(f"Loaded files of sample '{name}'")
    return SampleInput(
        id=sample_id,
        name=name,
        source_software=software,
        peptide_text=texts[0],
        protein_text=texts[1],
    )


def load_sample_inputs(sheet_path: Union[str, Path]) -> List[SampleInput]:
    """
    Load every sample listed in a sample sheet.

    The sheet is a delimited table with the columns ``name``, ``software``,
    ``peptides`` and optionally ``proteins`` and ``id``. Relative file paths
    are resolved against the folder of the sheet.

    Raises:
        InvalidSampleConfigError: If the sheet or one of its entries is invalid
    """
    sheet_path = Path(sheet_path)
    sheet = parse_file(sheet_path)
    try:
        validate_required_columns({"sample sheet": (sheet.header, SAMPLE_SHEET_REQUIRED)})
    except MissingColumnError as e:
        raise InvalidSampleConfigError(str(e)) from e

    def resolve(value: Optional[str]) -> Optional[Path]:
        if not value:
            return None
        path = Path(value)
        return path if path.is_absolute() else sheet_path.parent / path

    inputs = []
    for index, row in enumerate(sheet.rows, start=1):
        raw_id = row.get(SAMPLE_SHEET_ID, "")
        try:
            sample_id = int(raw_id) if raw_id else index
        except ValueError as e:
            raise InvalidSampleConfigError(f"Invalid sample id '{raw_id}'") from e
        inputs.append(
            load_sample_input(
                sample_id,
                row[SAMPLE_SHEET_NAME],
                row[SAMPLE_SHEET_SOFTWARE],
                resolve(row[SAMPLE_SHEET_PEPTIDES]),
                resolve(row.get(SAMPLE_SHEET_PROTEINS)),
            )
        )
    logger.info(f"Loaded {len(inputs)} samples from {sheet_path}")
    return inputs


# ============================================================================
# Processing
# ============================================================================


def validate_sample_inputs(inputs: Sequence[SampleInput]) -> None:
    """
    Check names, ids and required files of a whole batch before any parsing.

    Raises:
        InvalidSampleConfigError: On the first invalid input
    """
    seen_ids = set()
    seen_names = set()
    for sample_input in inputs:
        label = sample_input.name or f"#{sample_input.id}"
        if not sample_input.name or not sample_input.name.strip():
            raise InvalidSampleConfigError(f"Sample #{sample_input.id}: missing name")
        if sample_input.id in seen_ids:
            raise InvalidSampleConfigError(
                f"Sample '{label}': duplicate sample id {sample_input.id}"
            )
        seen_ids.add(sample_input.id)
        if sample_input.name in seen_names:
            logger.warning(f"Sample name '{sample_input.name}' is used more than once")
        seen_names.add(sample_input.name)

        adapter = get_adapter(sample_input.source_software)
        if sample_input.peptide_text is None:
            raise InvalidSampleConfigError(f"Sample '{label}': missing peptide file")
        if adapter.requires_protein_table and sample_input.protein_text is None:
            raise InvalidSampleConfigError(
                f"Sample '{label}': {sample_input.source_software.value} needs a protein file"
            )


def _parse_table(text: str, table: str, normalize_decimals: bool) -> ParsedTable:
    try:
        return parse(text, normalize_decimals)
    except EmptyTableError as e:
        raise EmptyTableError(table) from e


def process_sample(
    sample_input: SampleInput, classifier: Optional[PathogenicClassifier] = None
) -> Sample:
    """Parse and adapt the tables of one sample."""
    adapter = get_adapter(sample_input.source_software)
    peptides = _parse_table(
        sample_input.peptide_text, "peptide table", adapter.normalize_decimals
    )
    proteins = None
    if sample_input.protein_text is not None:
        proteins = _parse_table(
            sample_input.protein_text, "protein table", adapter.normalize_decimals
        )

    context = SampleContext(
        sample_id=sample_input.id,
        sample_name=sample_input.name,
        classifier=classifier or PathogenicClassifier(),
    )
    result = adapter.adapt(
        peptides.rows, proteins.rows if proteins is not None else None, context
    )
    skipped = peptides.skipped_count
    if proteins is not None:
        skipped += proteins.skipped_count
    return Sample(
        id=sample_input.id,
        name=sample_input.name,
        source_software=sample_input.source_software,
        analysis_results=result.records,
        total_peptides_count=result.total_peptides,
        total_proteins_count=result.total_proteins,
        normalization_factor=result.normalization_factor,
        skipped_rows=skipped,
    )


def process_batch(
    inputs: Sequence[SampleInput], classifier: Optional[PathogenicClassifier] = None
) -> List[Sample]:
    """
    Process samples in input order, stopping at the first failure.

    Raises:
        InvalidSampleConfigError: If any input is invalid, before any parsing
        BatchProcessingError: Wrapping the error of the first failing sample
    """
    validate_sample_inputs(inputs)
    classifier = classifier or PathogenicClassifier()
    samples = []
    for sample_input in inputs:
        logger.info(
            f"Processing sample '{sample_input.name}' ({sample_input.source_software.value})"
        )
        try:
            samples.append(process_sample(sample_input, classifier))
        except ProteoVariantError as e:
            logger.error(f"Sample '{sample_input.name}' failed: {e}")
            raise BatchProcessingError(sample_input.name, e) from e
    return samples


class SampleStore:
    """Holds the current sample set; a batch replaces it only when it fully succeeds."""

    def __init__(self, classifier: Optional[PathogenicClassifier] = None):
        self.classifier = classifier or PathogenicClassifier()
        self._samples: Tuple[Sample, ...] = ()

    @property
    def samples(self) -> Tuple[Sample, ...]:
        return self._samples

    def run_batch(self, inputs: Sequence[SampleInput]) -> Tuple[Sample, ...]:
        samples = process_batch(inputs, self.classifier)
        self._samples = tuple(samples)
        return self._samples

    def get(self, sample_id: int) -> Sample:
        for sample in self._samples:
            if sample.id == sample_id:
                return sample
        raise KeyError(sample_id)

    def select(self, sample_ids: Iterable[int]) -> List[Sample]:
        """Samples in the order of the requested ids."""
        return [self.get(sample_id) for sample_id in sample_ids]

    def rename(self, sample_id: int, name: str) -> Sample:
        renamed = self.get(sample_id).renamed(name)
        self._samples = tuple(
            renamed if sample.id == sample_id else sample for sample in self._samples
        )
        return renamed
