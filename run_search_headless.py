"""
Headless circle search - no GUI windows, just saves results
Usable for batch processing or remote servers
"""

import sys
from dataclasses import asdict
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from circlefinder.config import DEFAULT_CONFIG, SearchConfig, load_config, load_search_config
from circlefinder.core import CircleFinder
from circlefinder.detection import create_detector
from circlefinder.exceptions import CircleFinderError
from circlefinder.reporting.events import SearchEvents, LoggingReporter
from circlefinder.search.evaluator import min_separation, radius_bounds
from circlefinder.utils.io_handler import JSONWriter, load_image
from circlefinder.utils.logger import setup_logger, create_session_log_file


def main():
    """Search a single image for the best matching circle."""

    single = '--single' in sys.argv
    args = [arg for arg in sys.argv[1:] if arg != '--single']

    if len(args) < 2:
        print("Usage: python run_search_headless.py <path_to_image> <target_diameter> [config.yaml] [hough|contour] [--single]")
        print("\nExample:")
        print("  python run_search_headless.py test_data/plate.png 100 search.yaml")
        print("  python run_search_headless.py test_data/plate.png 100 --single")
        sys.exit(1)

    image_path = args[0]
    config_path = args[2] if len(args) > 2 else None
    detector_name = args[3] if len(args) > 3 else 'hough'

    if not Path(image_path).exists():
        print(f"[X] Error: Image not found at '{image_path}'")
        sys.exit(1)

    try:
        target_diameter = float(args[1])
        if config_path:
            config = load_search_config(config_path, target_diameter=target_diameter)
            detector = create_detector(detector_name, load_config(config_path))
        else:
            config = SearchConfig(target_diameter=target_diameter).validate()
            detector = create_detector(detector_name, DEFAULT_CONFIG)
    except (ValueError, CircleFinderError) as e:
        print(f"[X] Error: {e}")
        sys.exit(1)

    logger = setup_logger('circlefinder', log_file=create_session_log_file())
    events = SearchEvents()
    LoggingReporter(logger).attach(events)

    print("=" * 60)
    print("Circle Finder - Headless Search")
    print("=" * 60)
    print(f"Input: {image_path}")
    print(f"Detector: {detector_name}")

    output_dir = Path("output")

    if single:
        detect_once(image_path, config.target_diameter, detector, output_dir)
        return

    output_path = output_dir / f"{Path(image_path).stem}_circle.png"

    finder = CircleFinder(config, detector=detector, events=events)
    result = finder.find(image_path, output_path=output_path)

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    print(f"Combinations:     {result.combinations_tested}/{result.total_combinations}")
    print(f"Circles Found:    {result.circles_found}")
    if result.found:
        best = result.best
        print(f"Best Parameters:  Canny={best.canny_threshold}, Accum={best.accumulator_threshold}")
        print(f"Center:           ({best.circle.x:.1f}, {best.circle.y:.1f})")
        print(f"Diameter:         {best.circle.diameter:.1f}px (target {config.target_diameter}px)")
        print(f"Score:            {best.score:.4f}")
        print(f"\n[OK] Annotated result saved to: {output_path}")
    else:
        print("Best Parameters:  [FAIL] No matching circle")
    print(f"Processing Time:  {result.elapsed_ms:.0f}ms")
    print("=" * 60)

    json_path = output_dir / f"{Path(image_path).stem}_search.json"
    size_weight, center_weight = config.normalized_weights()
    JSONWriter.save_results({
        'image': str(image_path),
        'config': config.to_dict(),
        'circle': asdict(result.circle) if result.found else None,
        'parameters': result.parameters_dict(config.target_diameter, size_weight, center_weight),
        'result_info': result.result_info(config.target_diameter),
    }, str(json_path))
    print(f"[OK] Search JSON saved to: {json_path}")


def detect_once(image_path, target_diameter, detector, output_dir):
    """Run the detector once with its default thresholds and save every circle found."""
    min_radius, max_radius = radius_bounds(target_diameter)
    output_path = output_dir / f"{Path(image_path).stem}_detected.png"

    lines = detector.process_and_save(load_image(image_path), output_path,
                                      min_radius=min_radius, max_radius=max_radius,
                                      min_separation=min_separation(target_diameter))

    print(f"\nCircles found: {len(lines)}")
    for line in lines:
        print(f"  {line}")
    print(f"\n[OK] Detected circles saved to: {output_path}")


if __name__ == "__main__":
    main()
