"""
Temporal sequence modeling per record type.

For every record type, a representative "expected order" of events is the LCS
folded over a sample of event sequences taken from records that:

- are not already known duplicates, and
- have every logical attribute timestamped (primary pool), or at least one
  timestamp (contingency pool, used only for record types with no record in
  the primary pool).

Each record is then split against its type's LCS into constrained and
unconstrained sequences (see Record.apply_lcs).
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Sequence

from temporal_dedup.config import DedupConfig
from temporal_dedup.constants import DEFAULT_LCS_RANDOM_PROBABILITY
from temporal_dedup.matching.lcs import LCS, fold_lcs
from temporal_dedup.records.models import Record

logger = logging.getLogger(__name__)


class RecordTypeSequence:
    """
    Sampled event sequences and their running LCS for one record type.

    Sampling takes every Nth submitted sequence (counting from the first), or
    each sequence with 50% probability when random selection is on, until the
    sample cap is reached. Once the cap is reached the accumulator is complete
    and ignores further submissions.
    """

    def __init__(
        self,
        record_type: str,
        sample_cap: int,
        take_every_x: int = 1,
        random_selection: bool = False,
        rng: Optional[random.Random] = None,
    ):
        self.record_type = record_type
        self.sample_cap = sample_cap
        self.take_every_x = take_every_x
        self.random_selection = random_selection
        self._rng = rng or random.Random()

        self.samples: list[str] = []
        self.submissions = 0
        self.complete = False

        self._lcs: Optional[LCS] = None
        self._lcs_sample_count = 0

    def add_sequence(self, sequence: str) -> bool:
        """
        Submit an event sequence for sampling.

        Returns:
            True if the sequence was taken as a sample
        """
        if self.complete:
            self.submissions += 1
            return False

        if self.random_selection:
            take = self._rng.random() < DEFAULT_LCS_RANDOM_PROBABILITY
        else:
            take = self.submissions % self.take_every_x == 0
        self.submissions += 1

        if take:
            self.samples.append(sequence)
            if len(self.samples) >= self.sample_cap:
                self.complete = True
        return take

    @property
    def lcs(self) -> Optional[LCS]:
        """LCS folded over the samples taken so far; None before any sample is taken."""
        if not self.samples:
            return None
        if self._lcs is None or self._lcs_sample_count != len(self.samples):
            self._lcs = fold_lcs(self.samples)
            self._lcs_sample_count = len(self.samples)
        return self._lcs

    def __repr__(self) -> str:
        return (
            f"RecordTypeSequence(record_type={self.record_type!r}, samples={len(self.samples)}, "
            f"complete={self.complete})"
        )


@dataclass
class SequenceModel:
    """Per record type LCS model and the outcome of applying it."""

    sequences: dict[str, RecordTypeSequence] = field(default_factory=dict)
    non_adherent_ids: list[int] = field(default_factory=list)
    ignored_record_types: list[str] = field(default_factory=list)

    def lcs_for(self, record_type: str) -> Optional[LCS]:
        sequence = self.sequences.get(record_type)
        return sequence.lcs if sequence else None


def collect_record_type_sequences(
    records: Sequence[Record],
    config: DedupConfig,
    rng: Optional[random.Random] = None,
) -> dict[str, RecordTypeSequence]:
    """
    Sample event sequences per record type from records not already flagged duplicate.

    Args:
        records: Records after the base match stage
        config: Model parameters (sampling count and mode)
        rng: Random source for random sampling (seeded from config if omitted)

    Returns:
        Mapping of record type to its sequence accumulator
    """
    if rng is None:
        rng = random.Random(config.random_seed)
    cap, every_x, random_selection = config.sampling_for(len(records))

    def new_sequence(record_type: str) -> RecordTypeSequence:
        return RecordTypeSequence(record_type, cap, every_x, random_selection, rng)

    primary: dict[str, RecordTypeSequence] = {}
    contingency: dict[str, RecordTypeSequence] = {}

    for record in records:
        if record.has_known_duplicate:
            continue
        if record.all_timestamped():
            pool = primary
        elif record.any_timestamped():
            pool = contingency
        else:
            continue
        if record.record_type not in pool:
            pool[record.record_type] = new_sequence(record.record_type)
        pool[record.record_type].add_sequence(record.event_sequence)

    # Contingency sequences only stand in for record types with no primary sample
    for record_type, sequence in contingency.items():
        primary.setdefault(record_type, sequence)

    return primary


def apply_sequence_model(
    records: Sequence[Record], sequences: dict[str, RecordTypeSequence]
) -> SequenceModel:
    """
    Split every record's event sequence against its record type's LCS.

    A missing LCS, or an LCS of a single token, is reported once per record
    type and leaves the record trivially adherent.
    """
    model = SequenceModel(sequences=sequences)
    warned: set[str] = set()

    for record in records:
        lcs = model.lcs_for(record.record_type)

        if (lcs is None or lcs.length <= 1) and record.record_type not in warned:
            warned.add(record.record_type)
            model.ignored_record_types.append(record.record_type)
            if lcs is None or lcs.length == 0:
                logger.warning(f"Did not acquire an LCS for record type: {record.record_type}")
            else:
                logger.warning(f"Ignoring LCS of length 1 for record type: {record.record_type}")

        usable = lcs.sequence if lcs is not None and lcs.length > 1 else None
        if not record.apply_lcs(usable):
            model.non_adherent_ids.append(record.id)

    return model


def model_event_sequences(
    records: Sequence[Record],
    config: DedupConfig,
    rng: Optional[random.Random] = None,
) -> SequenceModel:
    """Build the per record type LCS model and apply it to every record."""
    sequences = collect_record_type_sequences(records, config, rng)
    logger.info(f"Determined LCS sequences for {len(sequences)} record types")
    return apply_sequence_model(records, sequences)
