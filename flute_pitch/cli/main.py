"""Main entry point for the flute_pitch CLI."""

import json
import time
from typing import List, Optional, Tuple

import click

from ..assessment import NoteCapture
from ..audio.file_input import WavFileInput
from ..core.config import ConfigError, ConfigManager
from ..core.factory import ComponentFactory
from ..logging_config import setup_logging
from ..note_matcher import NoteMatcher
from ..note_types import PitchEstimate
from ..note_utils import note_to_frequency, pitch_class
from .display import format_estimate

# Pull-mode polling rate, roughly one display refresh
POLL_INTERVAL = 1 / 60


def _factory(ctx: click.Context) -> ComponentFactory:
    try:
        return ComponentFactory(ConfigManager(ctx.obj["config_dir"]))
    except ConfigError as e:
        raise click.ClickException(str(e))


def _check_target(target: Optional[str]) -> None:
    if target is not None and pitch_class(target) is None:
        raise click.BadParameter(f"Not a note name: {target}", param_hint="--target")


def _line(estimate: Optional[PitchEstimate], target: Optional[str], tolerance: float) -> str:
    match = NoteMatcher.match(estimate, target, tolerance) if target else None
    return format_estimate(estimate, match)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Configuration directory (default: ~/.config/flute_pitch)",
)
@click.pass_context
def cli(ctx, debug, config_dir):
    """Pitch detection and tuning for wind instruments."""
    setup_logging(level="DEBUG" if debug else "WARNING")
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir


@cli.command()
@click.option("--mode", type=click.Choice(["push", "pull"]), default="push", help="Where the detector runs")
@click.option("--device", "-d", type=int, default=None, help="Audio input device ID")
@click.option("--duration", "-t", type=float, default=30.0, help="Seconds to listen")
@click.option("--target", default=None, help="Target note to match, e.g. G or A4")
@click.pass_context
def tuner(ctx, mode, device, duration, target):
    """Show live pitch readings from the microphone."""
    _check_target(target)
    factory = _factory(ctx)
    try:
        audio_input = factory.create_audio_input(device_id=device)
        service = factory.create_service(mode, audio_input=audio_input)
    except (ConfigError, OSError) as e:
        raise click.ClickException(str(e))
    tolerance = service.estimator.config.match_tolerance_cents

    def show(estimate: Optional[PitchEstimate]) -> None:
        click.echo("\r" + _line(estimate, target, tolerance), nl=False)

    if mode == "push":
        started = service.start(
            on_pitch=lambda estimate, _ts: show(estimate),
            on_silence=lambda _ts: show(None),
        )
    else:
        started = service.start()
    if not started:
        raise click.ClickException("Could not start audio input")

    click.echo(f"Listening for {duration:.0f}s ({mode} mode, {service.sample_rate:.0f} Hz). Ctrl+C to stop.")
    deadline = time.time() + duration
    try:
        while time.time() < deadline:
            if mode == "pull":
                show(service.poll())
            time.sleep(POLL_INTERVAL)
    except KeyboardInterrupt:
        pass
    finally:
        service.stop()
        click.echo()


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--target", default=None, help="Target note to match, e.g. G or A4")
@click.option("--mode", type=click.Choice(["push", "pull"]), default="push", help="Where the detector runs")
@click.pass_context
def analyze(ctx, path, target, mode):
    """Run the detector over a recording, one line per analysis window."""
    _check_target(target)
    factory = _factory(ctx)
    try:
        audio_input = WavFileInput(path)
        service = factory.create_service(mode, audio_input=audio_input)
    except (ConfigError, RuntimeError) as e:
        raise click.ClickException(str(e))
    tolerance = service.estimator.config.match_tolerance_cents

    capture = NoteCapture()
    matches = 0
    windows = 0

    def on_window(estimate: Optional[PitchEstimate], timestamp: float) -> None:
        nonlocal matches, windows
        windows += 1
        capture.add(estimate)
        if target and NoteMatcher.match(estimate, target, tolerance).match:
            matches += 1
        click.echo(f"{timestamp:8.3f}s  {_line(estimate, target, tolerance)}")

    if mode == "push":
        service.start(
            on_pitch=on_window,
            on_silence=lambda ts: on_window(None, ts),
        )
        audio_input.pump_all()
    else:
        service.start()
        while audio_input.pump():
            for estimate, timestamp in service.poll_all():
                on_window(estimate, timestamp)
    service.stop()

    summary = capture.summarize()
    click.echo()
    if summary is None:
        click.echo(f"No pitch detected in {windows} window(s).")
    else:
        click.echo(
            f"Most common note: {summary.note} ({summary.frequency} Hz, "
            f"{summary.samples} of {windows} windows)"
        )
    if target:
        click.echo(f"Matched {target}: {matches} of {windows} windows")


@cli.command("note-freq")
@click.argument("notes", nargs=-1, required=True)
@click.option("--a4", type=float, default=440.0, help="Reference frequency of A4")
@click.pass_context
def note_freq(ctx, notes, a4):
    """Print the equal-temperament frequency of each NOTE (e.g. G4)."""
    failed = False
    for note in notes:
        frequency = note_to_frequency(note, a4)
        if frequency is None:
            click.echo(f"{note}: not a note name", err=True)
            failed = True
        else:
            click.echo(f"{note}: {frequency:.2f} Hz")
    if failed:
        ctx.exit(1)


@cli.command()
def devices():
    """List audio input devices."""
    try:
        from ..audio.audio_input import list_input_devices

        found = list_input_devices()
    except OSError as e:
        raise click.ClickException(f"Audio system unavailable: {e}")

    if not found:
        click.echo("No input devices found.")
    for device in found:
        click.echo(
            f"{device['id']:>3}: {device['name']} "
            f"({device['channels']} ch, {device['default_samplerate']:.0f} Hz)"
        )


def _parse_assignment(text: str) -> Tuple[str, object]:
    if "=" not in text:
        raise click.BadParameter(f"Expected KEY=VALUE, got {text}", param_hint="--set")
    key, raw = text.split("=", 1)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key.strip(), value


@cli.command()
@click.option("--set", "assignments", multiple=True, help="Detector option as KEY=VALUE")
@click.option("--reset", is_flag=True, help="Restore the default detector options")
@click.pass_context
def config(ctx, assignments: List[str], reset):
    """Show or change the detector configuration."""
    manager = _factory(ctx).config_manager
    try:
        if reset:
            path = manager.reset_config(ConfigManager.DETECTOR)
            click.echo(f"Reset {path}")
        if assignments:
            updates = dict(_parse_assignment(a) for a in assignments)
            path = manager.update_config(ConfigManager.DETECTOR, updates)
            click.echo(f"Saved {path}")
        detector = manager.get_detector_config()
    except ConfigError as e:
        raise click.ClickException(str(e))

    click.echo(json.dumps(detector.to_dict(), indent=2))


def main(args: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv
    """
    cli(args=args, prog_name="flute-pitch")


if __name__ == "__main__":
    main()
