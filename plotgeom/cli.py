from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
import tomllib
from typing import Any, Mapping, Sequence

import numpy as np

from plotgeom.config import plot_config_from_mapping
from plotgeom.errors import PlotDataError, PlotError
from plotgeom.figure import HistogramPlot, Plot
from plotgeom.hist import DEFAULT_BINS, Centers, EvenCount, as_bin_spec, build_histogram


LOGGER = logging.getLogger(__name__)

_JOB_KEYS = {"width", "height", "curves", "annotations", "histogram"}
_CURVE_KEYS = {
    "x",
    "y",
    "line",
    "markers",
    "line_style",
    "line_width",
    "line_color",
    "marker_style",
    "marker_color",
    "fill_color",
}
_ANNOTATION_KEYS = {"text", "x", "y", "color"}
_HISTOGRAM_KEYS = {"samples", "bins", "centers"}


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="plotgeom")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log layout decisions to stderr.")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a TOML plot job to PNG.")
    render.add_argument("job", type=Path)
    render.add_argument("-o", "--output", type=Path, required=True)
    render.add_argument("--width", type=int, default=None, help="Image width. Default: job `width` or 800.")
    render.add_argument("--height", type=int, default=None, help="Image height. Default: job `height` or 600.")

    hist = sub.add_parser("hist", help="Bin samples from a text file and print center/count rows.")
    hist.add_argument("samples", type=Path)
    bins = hist.add_mutually_exclusive_group()
    bins.add_argument("--bins", type=int, default=None)
    bins.add_argument("--centers", type=_parse_centers, default=None, help="Comma separated bin centers.")
    hist.add_argument("-o", "--output", type=Path, default=None, help="Also render the histogram to PNG.")
    hist.add_argument("--width", type=int, default=800)
    hist.add_argument("--height", type=int, default=600)
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "render":
            return _render(args.job, args.output, args.width, args.height)
        if args.command == "hist":
            if args.centers is not None:
                spec: EvenCount | Centers = Centers(tuple(args.centers))
            else:
                spec = EvenCount(DEFAULT_BINS if args.bins is None else args.bins)
            return _hist(args.samples, spec, args.output, args.width, args.height)
    except (PlotError, ValueError, OSError) as exc:
        print(f"plotgeom: error: {exc}", file=sys.stderr)
        return 2
    raise RuntimeError(f"unsupported command: {args.command}")


def build_job(raw: Mapping[str, Any], *, width: int | None = None, height: int | None = None) -> Plot:
    """Build a ``Plot`` from a parsed job table (plot config plus data tables)."""
    config_raw = {key: value for key, value in raw.items() if key not in _JOB_KEYS}
    config = plot_config_from_mapping(config_raw)
    w = width if width is not None else int(raw.get("width", 800))
    h = height if height is not None else int(raw.get("height", 600))

    histogram = raw.get("histogram")
    if histogram is not None:
        _check_keys(histogram, _HISTOGRAM_KEYS, "histogram")
        if "bins" in histogram and "centers" in histogram:
            raise ValueError("`histogram` takes `bins` or `centers`, not both")
        spec = as_bin_spec(histogram.get("centers", histogram.get("bins", 10)))
        plot: Plot = HistogramPlot(histogram.get("samples"), spec, width=w, height=h)
        plot.config = plot_config_from_mapping(config_raw, base=plot.config)
    else:
        plot = Plot(width=w, height=h, config=config)

    for i, curve in enumerate(raw.get("curves", [])):
        _check_keys(curve, _CURVE_KEYS, f"curves[{i}]")
        if "x" not in curve:
            raise ValueError(f"`curves[{i}]` needs `x`")
        handle = plot.add_curve(curve["x"], curve.get("y"))
        if "line" in curve:
            handle.line(bool(curve["line"]))
        if "markers" in curve:
            handle.markers(bool(curve["markers"]))
        if "line_style" in curve:
            handle.line_style(curve["line_style"])
        if "line_width" in curve:
            handle.line_width(curve["line_width"])
        if "line_color" in curve:
            handle.line_color(curve["line_color"])
        if "marker_style" in curve:
            handle.marker_style(curve["marker_style"])
        if "marker_color" in curve:
            handle.marker_color(curve["marker_color"])
        if "fill_color" in curve:
            handle.fill_color(curve["fill_color"])

    for i, annotation in enumerate(raw.get("annotations", [])):
        _check_keys(annotation, _ANNOTATION_KEYS, f"annotations[{i}]")
        try:
            text, x, y = annotation["text"], annotation["x"], annotation["y"]
        except KeyError as exc:
            raise ValueError(f"`annotations[{i}]` missing required field: {exc.args[0]}") from exc
        plot.add_annotation(text, x, y, annotation.get("color", "black"))
    return plot


def read_samples(path: Path) -> np.ndarray:
    text = path.read_text(encoding="utf-8")
    tokens = text.replace(",", " ").split()
    try:
        return np.asarray([float(t) for t in tokens], dtype=np.float64)
    except ValueError as exc:
        raise PlotDataError(f"{path}: {exc}") from exc


def _render(job: Path, output: Path, width: int | None, height: int | None) -> int:
    with job.open("rb") as f:
        raw = tomllib.load(f)
    plot = build_job(raw, width=width, height=height)
    plot.save_png(output)
    LOGGER.debug("rendered %s", job)
    print(f"wrote {output} ({plot.width}x{plot.height})")
    return 0


def _hist(samples_path: Path, spec: EvenCount | Centers, output: Path | None, width: int, height: int) -> int:
    samples = read_samples(samples_path)
    result = build_histogram(samples, spec)
    for center, count in zip(result.centers.tolist(), result.counts.tolist()):
        print(f"{center:.6g}\t{count}")
    if output is not None:
        HistogramPlot(samples, spec, width=width, height=height).save_png(output)
        print(f"wrote {output} ({width}x{height})")
    return 0


def _parse_centers(text: str) -> list[float]:
    try:
        return [float(part) for part in text.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid centers: {text!r}") from exc


def _check_keys(table: Any, allowed: set[str], name: str) -> None:
    if not isinstance(table, Mapping):
        raise ValueError(f"`{name}` must be a table")
    for key in table:
        if key not in allowed:
            raise ValueError(f"unknown `{name}` key: {key}")


if __name__ == "__main__":
    raise SystemExit(main())
