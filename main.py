import argparse
import logging
import sys
from typing import List, Optional

from config.config import Config
from src_phase_cloud.errors import PhaseCloudError
from src_phase_cloud.pipeline import PhaseCloudPipeline
from utils.logger_config import LoggerConfig, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fit and subtract the projective phase surface, then render the residual point cloud.")
    parser.add_argument("unwrapped", help="Input unwrapped phase array (.npy, .csv, .txt, .png, .tif, .exr)")
    parser.add_argument("quality", help="Input quality array, same shape as the phase array")
    parser.add_argument("output", help="Output image")
    parser.add_argument("-d", "--dimensions", help="Dimensions of the output image, WIDTHxHEIGHT (default 640x480)")
    parser.add_argument("-t", "--threshold", type=float,
                        help="Quality threshold, points at or below it are not plotted (default 0)")
    parser.add_argument("-z", "--zlim", help="Range of the z axis, START..END (use --zlim=-1..1 for negatives)")
    parser.add_argument("--xlim", help="Range of the x axis, START..END")
    parser.add_argument("--ylim", help="Range of the y axis, START..END")
    parser.add_argument("-m", "--mirror", action="store_true", default=None,
                        help="Mirror along the x axis in 3D space")
    parser.add_argument("--center", action="store_true", default=None,
                        help="Shift the residual to zero mean")
    parser.add_argument("--color-mode", choices=("clamped", "periodic"),
                        help="Clamp the residual to the z range, or wrap it every --color-period")
    parser.add_argument("--color-period", type=float, help="Wrap length of the periodic colour mode (default 1.0)")
    parser.add_argument("--colormap", help="Matplotlib colormap name overriding the mode's default")
    parser.add_argument("--fit-coefficients",
                        help="Use these a,b,c,d,e instead of fitting the surface "
                             "(use --fit-coefficients=-1,0,2,0,0 when a starts with a minus)")
    parser.add_argument("-b", "--backend", choices=("matplotlib", "gnuplot"), help="Renderer (default matplotlib)")
    parser.add_argument("--elevation", type=float, help="View elevation in degrees (default 30)")
    parser.add_argument("--azimuth", type=float, help="View azimuth in degrees (default -60)")
    parser.add_argument("--marker-size", type=float, help="Point marker size (default 1)")
    parser.add_argument("--title", help="Chart title")
    parser.add_argument("--show", action="store_true", default=None, help="Also display the chart (matplotlib)")
    parser.add_argument("--gnuplot-path", help="gnuplot executable (default: gnuplot on PATH)")
    parser.add_argument("-c", "--config", help="JSON configuration file, command-line values take precedence")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", help="Also write the log to this file")
    return parser


def load_config(args: argparse.Namespace) -> Config:
    """
    Merge the optional JSON configuration with command-line values.

    Args:
        args (argparse.Namespace): Parsed command-line arguments.

    Returns:
        Config: Validated configuration object.
    """
    overrides = {
        "unwrapped_path": args.unwrapped,
        "quality_path": args.quality,
        "output_path": args.output,
        "dimensions": args.dimensions,
        "threshold": args.threshold,
        "xlim": args.xlim,
        "ylim": args.ylim,
        "zlim": args.zlim,
        "mirror": args.mirror,
        "center": args.center,
        "color_mode": args.color_mode,
        "color_period": args.color_period,
        "colormap": args.colormap,
        "fit_coefficients": args.fit_coefficients,
        "backend": args.backend,
        "elevation": args.elevation,
        "azimuth": args.azimuth,
        "marker_size": args.marker_size,
        "title": args.title,
        "show": args.show,
        "gnuplot_path": args.gnuplot_path,
    }
    return Config(args.config, overrides)


def process_phase_cloud(config: Config) -> None:
    """
    Run the phase cloud pipeline using the provided configuration.

    Args:
        config (Config): Configuration object containing processing parameters.
    """
    pipeline = PhaseCloudPipeline(config)
    pipeline.run()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function to execute the phase cloud pipeline.

    Returns:
        int: Process exit status, 0 on success.
    """
    args = build_parser().parse_args(argv)
    if args.verbose:
        LoggerConfig.set_level(logging.DEBUG)
    if args.log_file:
        LoggerConfig.add_file_handler(args.log_file)

    try:
        config = load_config(args)
        process_phase_cloud(config)
    except PhaseCloudError as e:
        logger.error(f"{e.stage} stage failed: {e}")
        print(f"error ({e.stage}): {e}", file=sys.stderr)
        return 1

    print("Processing completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
