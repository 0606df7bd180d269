"""
Domain service: length-frequency histograms.

Lengths are binned in whole inches. The range runs from one inch below the
shortest fish to one inch above the longest, with the upper edge capped at
100 inches so a single mistyped length cannot produce thousands of empty
bins. Fish beyond the cap land in the last bin rather than being dropped,
and when every fish is beyond it the histogram is the single 99-100 bin.
"""
import logging
import math
from typing import Optional

import numpy as np

from fishsurvey.domain.metrics_models import LengthFrequency
from fishsurvey.domain.models import SamplingEvent
from fishsurvey.domain.species import SpeciesTable
from fishsurvey.utils.safe_math import is_measured
from fishsurvey.utils.units import mm_to_inches

logger = logging.getLogger(__name__)

MAX_BIN_EDGE_INCHES = 100


def species_lengths_inches(event: SamplingEvent, species_code: str) -> np.ndarray:
    """
    Measured lengths of one species in inches, batch entries repeated.

    Args:
        event: Sampling event snapshot
        species_code: Species to collect

    Returns:
        1-D array of lengths in inches (empty when none were measured)
    """
    values, counts = [], []
    for observation in event.iter_observations():
        if observation.species != species_code or not is_measured(observation.length):
            continue
        values.append(observation.length)
        counts.append(observation.count)
    lengths_mm = np.repeat(np.asarray(values, dtype=float), np.asarray(counts, dtype=int))
    return mm_to_inches(lengths_mm)


def bin_edges(lengths_in: np.ndarray) -> np.ndarray:
    """
    Whole-inch bin edges covering the lengths, capped at 100 inches.

    Args:
        lengths_in: Non-empty array of lengths in inches

    Returns:
        Ascending integer edges; always at least one bin
    """
    low = min(max(math.floor(float(lengths_in.min())) - 1, 0), MAX_BIN_EDGE_INCHES - 1)
    high = min(math.ceil(float(lengths_in.max())) + 1, MAX_BIN_EDGE_INCHES)
    if high <= low:
        high = low + 1
    return np.arange(low, high + 1)


def length_frequency(
    event: SamplingEvent,
    species_code: str,
    species_table: Optional[SpeciesTable] = None,
) -> Optional[LengthFrequency]:
    """
    Build the length-frequency histogram for one species.

    Args:
        event: Sampling event snapshot
        species_code: Species to plot
        species_table: Optional reference table for the display name and
            size-category markers

    Returns:
        LengthFrequency, or None when no fish of the species were measured
    """
    lengths = species_lengths_inches(event, species_code)
    if lengths.size == 0:
        logger.debug(f"No measured lengths for {species_code}; no histogram")
        return None

    edges = bin_edges(lengths)
    last_bin = len(edges) - 2
    indices = np.clip(np.floor(lengths - edges[0]), 0, last_bin).astype(int)
    counts = np.bincount(indices, minlength=last_bin + 1)

    reference = species_table.get(species_code) if species_table is not None else None
    markers = {}
    if reference is not None:
        markers = {
            category: round(mm_to_inches(threshold_mm), 2)
            for category, threshold_mm in reference.size_categories.items()
        }

    return LengthFrequency(
        species=species_code,
        species_name=reference.name if reference is not None else species_code,
        bin_labels=[f"{lo}-{hi}" for lo, hi in zip(edges[:-1].tolist(), edges[1:].tolist())],
        bin_edges=edges.tolist(),
        counts=counts.tolist(),
        n=int(lengths.size),
        size_markers=markers,
    )
