import os
import sys
import logging
import argparse

try:
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.panel import Panel
except ImportError:
    print("Error: The 'rich' library is required for the CLI but not installed.", file=sys.stderr)
    print("Please install it with: pip install waveprint[cli]", file=sys.stderr)
    sys.exit(1)

from waveprintlib import __version__
from waveprintlib.audio import format_duration, is_audio_file
from waveprintlib.config import ConfigError, default_config, load_preset, merge_configs
from waveprintlib.events import EventBus
from waveprintlib.pipeline import Pipeline
from waveprintlib.reports import output_prefix

console = Console(stderr=True)
log = logging.getLogger("waveprint")

LOG_LEVEL_ENV = "WAVEPRINT_LOG_LEVEL"
LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]


def positive_int(value):
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return ivalue


def non_negative_int(value):
    ivalue = int(value)
    if ivalue < 0:
        raise argparse.ArgumentTypeError("must be a non-negative integer")
    return ivalue


def non_negative_float(value):
    fvalue = float(value)
    if fvalue < 0.0:
        raise argparse.ArgumentTypeError("must be a non-negative number")
    return fvalue


def parse_arguments(argv=None):
    # -h is taken by --height
    parser = argparse.ArgumentParser(
        description="Waveform Generator: renders a WAV file's envelope to PNG plus a JSON summary",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        add_help=False,
        argument_default=argparse.SUPPRESS,
    )
    parser.add_argument("--help", action="help",
                        help="Show this help message and exit")
    parser.add_argument("--version", action="version",
                        version=f"waveprint {__version__}")

    parser.add_argument("-i", "--input", type=str, required=True,
                        metavar="WAV_FILE_NAME",
                        help="WAV file to be processed")
    parser.add_argument("-o", "--output", type=str, required=True,
                        metavar="GENERATED_IMAGE_FILE_NAME",
                        help="Output file name; its extension is replaced by "
                             "'-w<width>-z<zoom>-per<coverage>.png/.json'")

    # Window
    parser.add_argument("-z", "--zoom", dest="samples_per_pixel",
                        type=non_negative_int, metavar="SAMPLES_PER_PIXEL",
                        help="Samples folded into one pixel column (default 0: fit the window to the width)")
    parser.add_argument("-s", "--start", dest="start_time",
                        type=non_negative_float, metavar="START_TIME",
                        help="Window start in seconds (default 0)")
    parser.add_argument("-e", "--end", dest="end_time",
                        type=non_negative_float, metavar="END_TIME",
                        help="Window end in seconds (default: end of file). Not valid if zoom is specified.")

    # Image
    parser.add_argument("-w", "--width", dest="image_width",
                        type=positive_int, metavar="IMAGE_WIDTH",
                        help="Image width in pixels (default 1335)")
    parser.add_argument("-h", "--height", dest="image_height",
                        type=positive_int, metavar="IMAGE_HEIGHT",
                        help="Image height in pixels (default 220)")
    parser.add_argument("-t", "--theme", type=str.lower, choices=["line", "dot"],
                        help="Waveform theme (default line)")

    parser.add_argument("--preset", type=str, default=None,
                        help="JSON preset with default values for the options above")
    parser.add_argument("--log-level", dest="log_level", type=str.lower,
                        choices=LOG_LEVELS, default=None,
                        help=f"Log level (falls back to ${LOG_LEVEL_ENV}, then 'info')")

    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        parser.print_help(sys.stderr)
        sys.exit(1)

    args = parser.parse_args(argv)

    if getattr(args, "samples_per_pixel", 0) > 0 and hasattr(args, "end_time"):
        parser.error("zoom and end-time cannot be specified at the same time")

    return args


def setup_logging(level_name=None):
    name = (level_name or os.environ.get(LOG_LEVEL_ENV) or "info").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def cli_overrides(args):
    keys = ("samples_per_pixel", "start_time", "end_time",
            "image_width", "image_height", "theme")
    return {k: getattr(args, k) for k in keys if hasattr(args, k)}


def print_result(result):
    summary = result.summary
    frames = result.audio.samples.size // max(result.audio.channels, 1)
    console.print(Panel.fit(
        f"[bold]{os.path.basename(summary.source_file)}[/]\n"
        f"Format: [cyan]{summary.sample_rate} Hz / {summary.bits}-bit / "
        f"{result.audio.channels} ch[/] | Length: [cyan]"
        f"{format_duration(frames, summary.sample_rate)}[/]\n"
        f"Zoom: [cyan]{summary.samples_per_pixel} samples/px[/] | "
        f"Columns: [cyan]{summary.samples_length}[/] | "
        f"Coverage: [cyan]{summary.coverage_percent}%[/]\n"
        f"Summary: [green]{result.json_path}[/]\n"
        f"Image: [green]{result.image_path}[/]",
        title="Waveform",
    ))


def main(argv=None):
    args = parse_arguments(argv)
    setup_logging(args.log_level)

    if not os.path.isfile(args.input):
        console.print(f"[bold red]Error:[/] File '{args.input}' not found.")
        return 1
    if not is_audio_file(args.input):
        log.warning("'%s' does not have a known audio extension.", args.input)

    config = default_config()
    if args.preset:
        try:
            config = merge_configs(config, load_preset(args.preset))
        except ConfigError as e:
            console.print(f"[bold red]Error:[/] {e}")
            return 1
    config = merge_configs(config, cli_overrides(args))
    log.debug("Current configuration is %s", config)

    event_bus = EventBus()

    def on_insufficient_data(columns_drawn, image_width):
        console.print(
            f"[yellow]Warning:[/] only {columns_drawn} of {image_width} columns "
            f"could be drawn; the rest of the image is left blank."
        )
    event_bus.subscribe("render.insufficient_data", on_insufficient_data)

    try:
        pipeline = Pipeline(config, event_bus=event_bus)
        result = pipeline.run(args.input, output_prefix(args.output))
    except ConfigError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return 1
    except (ValueError, RuntimeError, OSError) as e:
        # envelope / format errors are ValueErrors, libsndfile raises RuntimeError
        console.print(f"[bold red]Error:[/] {e}")
        return 1

    print_result(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
