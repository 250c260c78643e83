"""Basic usage example for circlefinder."""

from circlefinder.core import find_single_circle
from circlefinder.reporting.events import SearchEvents


def main():
    """Run a single circle search with progress printed to the console."""
    image_path = "test_data/images/sample_plate.png"

    events = SearchEvents()
    events.subscribe_progress(lambda e: print(f"{e.message} ({e.percent_complete:.0f}%)"))
    events.subscribe_status(lambda e: print(("[!] " if e.is_warning_or_error else "") + e.message))

    circle = find_single_circle(
        image_path,
        target_diameter=100,
        output_path="output/center_aware_circle_sample_plate.png",
        events=events,
        canny_step=2,
        accum_step=2,
    )

    if circle is not None:
        print(f"Found optimal circle with diameter: {circle.diameter:.1f}px")
    else:
        print("No circle matched the target diameter")


if __name__ == "__main__":
    main()
