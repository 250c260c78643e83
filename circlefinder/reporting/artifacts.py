"""Files written after a search: ranked candidate images, summary and annotated result."""

from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from circlefinder.reporting.events import SearchEvents
from circlefinder.search.models import ScoredCandidate, SearchResult
from circlefinder.utils.io_handler import save_image, write_text
from circlefinder.utils.visualization import annotate_best, annotate_candidate

SUMMARY_FILENAME = "search_summary.txt"


def search_log_dir(output_path: Union[str, Path]) -> Path:
    """Directory next to output_path that holds the per-candidate images."""
    output_path = Path(output_path)
    return output_path.parent / f"parameter_search_{output_path.stem}"


def candidate_filename(rank: int, candidate: ScoredCandidate) -> str:
    return (f"Rank{rank}_Score{candidate.score:.3f}"
            f"_C{candidate.canny_threshold}_A{candidate.accumulator_threshold}.png")


def summary_lines(config, result: SearchResult, workers: int) -> List[str]:
    """Plain-text search summary, one entry per line."""
    size_weight, center_weight = config.normalized_weights()
    lines = [
        "Parallel Parameter Search Summary",
        "===============================",
        f"Target diameter: {config.target_diameter} px",
        f"Diameter tolerance: {config.diameter_tolerance} px",
        f"Canny range: {config.canny_start}-{config.canny_end}, step {config.canny_step}",
        f"Accumulator range: {config.accum_start}-{config.accum_end}, step {config.accum_step}",
        f"Threads used: {workers}",
        f"Size weight: {size_weight:.2f}, Center weight: {center_weight:.2f}",
        f"Combinations tested: {result.combinations_tested}",
        f"Circles found: {result.circles_found}",
        "",
        "Best Result",
        "==========",
    ]

    best = result.best
    if best is None:
        lines.append("No circle matched the search criteria")
        return lines

    circle = best.circle
    percent = best.size_difference / config.target_diameter * 100
    lines.extend([
        f"Canny threshold: {best.canny_threshold}",
        f"Accumulator threshold: {best.accumulator_threshold}",
        f"Circle center: ({circle.x:.1f}, {circle.y:.1f})",
        f"Circle diameter: {circle.diameter:.1f}px",
        f"Difference from target: {best.size_difference:.1f}px ({percent:.1f}% of target)",
        f"Distance from image center: {best.center_distance:.1f}px",
        f"Combined score: {best.score:.4f}",
    ])
    return lines


class ArtifactWriter:
    """
    Writes search artifacts. Runs single-threaded after the parallel phase.

    Failures on one file are reported as warning statuses and never stop
    the remaining writes.
    """

    def __init__(self, events: Optional[SearchEvents] = None):
        self.events = events or SearchEvents()

    def export_candidates(self, image: np.ndarray, candidates: List[ScoredCandidate],
                          image_center: Tuple[float, float], log_dir: Union[str, Path]) -> List[Path]:
        """
        Save one annotated image per candidate, named by rank.

        Args:
            image: Source image; never modified
            candidates: Candidates already sorted best first and capped
            image_center: (x, y) center used for the crosshair and center line
            log_dir: Directory receiving the images

        Returns:
            Paths that were written successfully
        """
        log_dir = Path(log_dir)
        saved = []
        for candidate in candidates:
            path = log_dir / candidate_filename(len(saved) + 1, candidate)
            try:
                annotated = annotate_candidate(image, candidate, image_center)
                if not save_image(annotated, path):
                    raise OSError(f"could not write {path}")
                saved.append(path)
            except Exception as e:
                self.events.emit_status(f"Error saving image: {e}", True)
        return saved

    def write_summary(self, log_dir: Union[str, Path], config, result: SearchResult,
                      workers: int) -> Optional[Path]:
        """Write search_summary.txt into log_dir. Returns None if the write failed."""
        path = Path(log_dir) / SUMMARY_FILENAME
        try:
            write_text(summary_lines(config, result, workers), path)
        except OSError as e:
            self.events.emit_status(f"Error writing summary: {e}", True)
            return None
        return path

    def save_best(self, image: np.ndarray, best: ScoredCandidate,
                  image_center: Tuple[float, float], output_path: Union[str, Path]) -> bool:
        """Annotate the winning circle on a copy of image and save it."""
        annotated = annotate_best(image, best, image_center)
        if not save_image(annotated, output_path):
            self.events.emit_status(f"Error saving result image to {output_path}", True)
            return False
        return True
