"""Batch processing example for multiple images."""

from pathlib import Path
from circlefinder.config import SearchConfig
from circlefinder.core import CircleFinder
from circlefinder.reporting.events import SearchEvents, LoggingReporter
from circlefinder.utils.io_handler import JSONWriter
from circlefinder.utils.logger import setup_logger


def main():
    """Search every image in a folder with one shared configuration."""
    logger = setup_logger('batch_processor')

    events = SearchEvents()
    LoggingReporter(logger).attach(events)

    config = SearchConfig(target_diameter=100, diameter_tolerance=15,
                          canny_step=4, accum_step=4)
    finder = CircleFinder(config, events=events)

    images_dir = Path("test_data/images")
    image_files = sorted(images_dir.glob("*.png"))

    logger.info(f"Processing {len(image_files)} images...")

    results = []
    for i, image_path in enumerate(image_files):
        logger.info(f"Processing image {i+1}/{len(image_files)}: {image_path.name}")

        result = finder.find(str(image_path), output_path=f"output/{image_path.stem}_circle.png")
        entry = result.result_info(config.target_diameter)
        entry['image_name'] = image_path.name
        if result.found:
            entry['center'] = [result.circle.x, result.circle.y]
            entry['diameter'] = result.circle.diameter
        results.append(entry)

    # Save results
    JSONWriter.save_results(results, "output/batch_results.json")
    logger.info("Batch processing complete!")


if __name__ == "__main__":
    main()
