from __future__ import annotations

import argparse
import logging
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO, NoReturn

from .config import DURATION, SAMPLE_RATE, HatParams, RenderSettings
from .errors import Hat606Error, WavWriteError
from .logging_utils import configure_logging, debug_enabled, log_exception
from .spinner import Spinner, render_error
from .synth import decay_samples, generate_hat
from .wav import open_output, read_wav, write_wav24

_LOGGER = logging.getLogger("hat606.cli")


class _Parser(argparse.ArgumentParser):
    """Argument errors exit with status 1, like every other failure."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


KNOB_COUNT = 4
_USAGE = (
    "%(prog)s tune decay level open [-o output.wav] [--sample-rate HZ] [--duration S] [--verify]"
)


def _add_output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        dest="output",
        metavar="output.wav",
        default=None,
        help="Write to this file instead of stdout.",
    )
    parser.add_argument("--sample-rate", type=int, default=SAMPLE_RATE)
    parser.add_argument("--duration", type=float, default=DURATION)
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Re-read the written file and check its length and rate.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="hat606",
        usage=_USAGE,
        description="Render a 606-style hi-hat to a 24-bit mono WAV.",
    )
    parser.add_argument("tune", help="0..1, shifts oscillator frequencies")
    parser.add_argument("decay", help="0..1, short to long")
    parser.add_argument("level", help="0..1, overall volume")
    parser.add_argument("open", help="0..1, 0 closed / 1 open")
    _add_output_options(parser)
    return parser


def _build_option_parser() -> argparse.ArgumentParser:
    """Parses what follows the knobs; the knobs never go through argparse."""
    parser = _Parser(prog="hat606", usage=_USAGE, add_help=False)
    _add_output_options(parser)
    return parser


def _stdout_sink() -> BinaryIO:
    return sys.stdout.buffer


def _verify(path: Path, num_samples: int, sample_rate: int) -> None:
    samples, rate = read_wav(path)
    if samples.size != num_samples or rate != sample_rate:
        raise WavWriteError(
            f"verification failed for '{path}': {samples.size} frames @ {rate} Hz, "
            f"expected {num_samples} @ {sample_rate} Hz"
        )
    _LOGGER.info("Verified %s: %s frames @ %s Hz", path, samples.size, rate)


def render(
    params: HatParams,
    settings: RenderSettings,
    sink: BinaryIO,
) -> int:
    """Synthesize one hit and stream it to ``sink``; return bytes written."""

    _LOGGER.debug(
        "tune=%s decay=%s level=%s open=%s -> decay %s samples",
        params.tune,
        params.decay,
        params.level,
        params.open,
        decay_samples(params, settings.sample_rate),
    )
    with Spinner("Rendering hi-hat"):
        audio = generate_hat(params, settings.sample_rate, settings.num_samples)
    return write_wav24(sink, audio, settings.sample_rate)


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = build_parser()
    raw = sys.argv[1:] if argv is None else list(argv)
    # Knobs are positional by index so "-1e-3" or "-abc" still reach parse_knob.
    knobs, rest = raw[:KNOB_COUNT], raw[KNOB_COUNT:]
    if any(token in ("-h", "--help") for token in knobs):
        parser.print_help()
        return 0
    try:
        if len(knobs) < KNOB_COUNT:
            parser.error("the following arguments are required: tune, decay, level, open")
        args, extras = _build_option_parser().parse_known_args(rest)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1
    if extras:
        _LOGGER.debug("Ignoring extra arguments: %s", extras)

    try:
        params = HatParams.from_strings(*knobs)
        settings = RenderSettings(sample_rate=args.sample_rate, duration=args.duration)
        with ExitStack() as stack:
            if args.output is not None:
                sink = stack.enter_context(open_output(args.output))
            else:
                sink = _stdout_sink()
            written = render(params, settings, sink)
        if args.output is not None:
            _LOGGER.info(
                "Wrote %s (%s bytes, %s samples @ %s Hz)",
                args.output,
                written,
                settings.num_samples,
                settings.sample_rate,
            )
            if args.verify:
                _verify(Path(args.output), settings.num_samples, settings.sample_rate)
        return 0
    except (Hat606Error, ValueError) as exc:
        _LOGGER.warning("hat606 CLI failed: %s", exc, exc_info=debug_enabled())
        log_exception("hat606 CLI", exc)
        render_error("hat606 CLI", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
