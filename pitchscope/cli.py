"""Command-line interface for pitchscope.

Provides commands for:
- analyze: Fundamental or multi-note pitch track, with MIDI/JSON export
- spectrum: Strongest bins of the time-averaged spectrum
- info: Show audio file information
"""

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .core.constants import DEFAULT_TRANSFORM_SIZE, DEFAULT_MAX_NOTES

app = typer.Typer(
    name="pitchscope",
    help="Spectrogram and pitch analysis for audio files",
    rich_markup_mode="markdown",
)
console = Console()


@dataclass
class StageTimings:
    """Wall-clock duration of each analysis stage, in seconds.

    Stages are timed with ``with timings.stage("name"):``; the frame count
    of the spectrogram lets the summary report a per-frame cost.
    """

    stages: Dict[str, float] = field(default_factory=dict)
    frames: int = 0

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.stages[name] = time.perf_counter() - start

    @property
    def total_time(self) -> float:
        return sum(self.stages.values())

    @property
    def per_frame_ms(self) -> float:
        """Mean analysis cost per spectrogram frame, excluding loading."""
        if self.frames <= 0:
            return 0.0
        analysis = self.total_time - self.stages.get("load", 0.0)
        return analysis * 1000 / self.frames

    def print_summary(self) -> None:
        console.print("\n[bold]Timing Summary:[/bold]")
        for name, duration in self.stages.items():
            console.print(f"  {name}: {duration * 1000:.1f} ms")
        if self.frames:
            console.print(f"  per frame: {self.per_frame_ms:.3f} ms ({self.frames} frames)")
        console.print(f"  [bold]Total: {self.total_time * 1000:.1f} ms[/bold]")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stages": self.stages,
            "frames": self.frames,
            "per_frame_ms": self.per_frame_ms,
            "total_time": self.total_time,
        }


def _setup_logging(verbose: bool) -> None:
    """Route pitchscope's library logging through rich when verbose."""
    logger = logging.getLogger("pitchscope")
    if not verbose:
        return
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    logger.setLevel(logging.DEBUG)


def _validate_transform(fft_size: int, hop_size: Optional[int]) -> int:
    """Check transform parameters before they reach the analysis core."""
    if fft_size < 4 or fft_size & (fft_size - 1):
        console.print(f"[red]Error: --fft-size must be a power of two >= 4, got {fft_size}[/red]")
        raise typer.Exit(1)
    if hop_size is None:
        return fft_size // 4
    if hop_size <= 0:
        console.print(f"[red]Error: --hop-size must be positive, got {hop_size}[/red]")
        raise typer.Exit(1)
    return hop_size


def _load_audio(input_file: Path) -> Tuple[np.ndarray, int]:
    """Load the first channel of an audio file or exit with an error."""
    from .input import AudioLoader

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        audio, sr = AudioLoader().load(str(input_file))
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error: Could not decode {input_file}: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if len(audio) == 0:
        console.print(f"[red]Error: No samples in {input_file}[/red]")
        raise typer.Exit(1)

    return audio, sr


def _write_json(result: Dict[str, Any], output: Optional[Path]) -> None:
    if output is None:
        console.print_json(data=result)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(result, indent=2))
    console.print(f"[green]Wrote JSON:[/green] {output}")


def _notes_to_dicts(notes) -> List[Dict[str, Any]]:
    return [
        {
            "pitch": note.pitch,
            "name": note.pitch_name,
            "onset": note.onset,
            "offset": note.offset,
            "velocity": note.velocity,
            "confidence": note.confidence,
        }
        for note in notes
    ]


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    fft_size: int = typer.Option(
        DEFAULT_TRANSFORM_SIZE, "--fft-size", "-n", help="Transform size (power of two)"
    ),
    hop_size: Optional[int] = typer.Option(
        None, "--hop-size", help="Samples between frames (default: fft-size / 4)"
    ),
    polyphonic: bool = typer.Option(
        False, "-p", "--polyphonic", help="Detect multiple simultaneous notes"
    ),
    max_notes: int = typer.Option(
        DEFAULT_MAX_NOTES, "--max-notes", help="Maximum notes per frame (polyphonic)"
    ),
    sensitivity: str = typer.Option(
        "medium", "--sensitivity", "-s", help="Detection sensitivity: low/medium/high/ultra"
    ),
    min_confidence: Optional[float] = typer.Option(
        None, "--min-confidence", help="Minimum frame confidence for note segmentation"
    ),
    midi: Optional[Path] = typer.Option(
        None, "--midi", "-m", help="Write segmented notes to a MIDI file"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write JSON results to this file"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Verbose output"
    ),
):
    """Estimate the pitch track of an audio file.

    **Examples:**

        pitchscope analyze voice.wav

        pitchscope analyze chord.wav -p --max-notes 4 --midi chord.mid

        pitchscope analyze song.flac --json -o song.json
    """
    from .analysis import config_for_sensitivity
    from .analyzer import AudioAnalyzer
    from .core import frequency_to_note, format_note
    from .output import MIDIExporter, track_to_notes, note_track_to_notes

    _setup_logging(verbose)
    hop_size = _validate_transform(fft_size, hop_size)
    if max_notes < 1:
        console.print(f"[red]Error: --max-notes must be >= 1, got {max_notes}[/red]")
        raise typer.Exit(1)

    try:
        config = config_for_sensitivity(sensitivity).with_max_notes(max_notes)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    timings = StageTimings()
    quiet = json_output and output is None

    if not quiet:
        console.print(f"[blue]Loading audio:[/blue] {input_file}")
    with timings.stage("load"):
        audio, sr = _load_audio(input_file)
    duration = len(audio) / sr

    if verbose and not quiet:
        console.print(f"  Duration: {duration:.2f}s, Sample rate: {sr}Hz")

    analyzer = AudioAnalyzer(transform_size=fft_size, hop_size=hop_size, config=config)

    with timings.stage("spectrogram"):
        spectrogram = analyzer.compute_spectrogram(audio, sr)
    timings.frames = spectrogram.n_frames

    if verbose and not quiet:
        console.print(
            f"  Frames: {spectrogram.n_frames}, bin width: {spectrogram.bin_width:.2f} Hz"
        )

    if spectrogram.n_frames == 0 and not quiet:
        console.print(
            f"[yellow]Audio shorter than one frame ({fft_size} samples); nothing to analyze[/yellow]"
        )

    if polyphonic:
        if not quiet:
            console.print("[blue]Detecting notes (polyphonic mode)...[/blue]")
        with timings.stage("multi-pitch"):
            track = analyzer.detect_multi_note_track(spectrogram, max_notes)
        threshold = 0.3 if min_confidence is None else min_confidence
        notes = note_track_to_notes(track, spectrogram.frame_duration, threshold)
        active = sum(1 for frame in track if len(frame) > 0)
    else:
        if not quiet:
            console.print("[blue]Tracking fundamental (monophonic mode)...[/blue]")
        with timings.stage("fundamental"):
            track = analyzer.estimate_fundamental_track(spectrogram)
        threshold = 0.5 if min_confidence is None else min_confidence
        notes = track_to_notes(track, spectrogram.frame_duration, threshold)
        active = int(np.count_nonzero(track.voiced))

    if midi is not None:
        MIDIExporter().export(notes, str(midi))
        if not quiet:
            console.print(f"[blue]Exported MIDI:[/blue] {midi}")

    if json_output or output is not None:
        result = {
            "input": str(input_file),
            "sample_rate": sr,
            "duration": duration,
            "transform_size": fft_size,
            "hop_size": hop_size,
            "polyphonic": polyphonic,
            "sensitivity": sensitivity.lower(),
            "frames": spectrogram.n_frames,
            "bin_width": spectrogram.bin_width,
            "active_frames": active,
            "track": track.to_dict(),
            "notes": _notes_to_dicts(notes),
        }
        if verbose:
            result["timings"] = timings.to_dict()
        _write_json(result, output)
        if quiet:
            return

    console.print(f"  Frames: {spectrogram.n_frames}, with pitch: {active}")
    if not polyphonic and active:
        voiced = track.frequencies[track.voiced]
        median = float(np.median(voiced))
        console.print(
            f"  Median f0: {median:.1f} Hz ({format_note(frequency_to_note(median))}), "
            f"mean confidence: {float(np.mean(track.confidences[track.voiced])):.2f}"
        )
    console.print(f"  Segmented {len(notes)} notes")

    if notes:
        _show_notes_table(notes)

    if verbose:
        timings.print_summary()


@app.command()
def spectrum(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    fft_size: int = typer.Option(
        DEFAULT_TRANSFORM_SIZE, "--fft-size", "-n", help="Transform size (power of two)"
    ),
    hop_size: Optional[int] = typer.Option(
        None, "--hop-size", help="Samples between frames (default: fft-size / 4)"
    ),
    top: int = typer.Option(10, "--top", "-t", help="Number of strongest bins to list"),
    json_output: bool = typer.Option(
        False, "--json", help="Output the full averaged spectrum as JSON"
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write JSON results to this file"
    ),
):
    """Show the strongest frequencies of the time-averaged spectrum."""
    from .analyzer import AudioAnalyzer

    hop_size = _validate_transform(fft_size, hop_size)
    audio, sr = _load_audio(input_file)

    analyzer = AudioAnalyzer(transform_size=fft_size, hop_size=hop_size)
    spectrogram = analyzer.compute_spectrogram(audio, sr)
    overall = analyzer.aggregate_spectrum(spectrogram)

    if json_output or output is not None:
        result = {
            "input": str(input_file),
            "sample_rate": sr,
            "frames": spectrogram.n_frames,
            "spectrum": overall.to_dict(),
        }
        _write_json(result, output)
        if output is None:
            return

    _show_spectrum_table(overall.strongest(top))


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    fft_size: int = typer.Option(
        DEFAULT_TRANSFORM_SIZE, "--fft-size", "-n", help="Transform size (power of two)"
    ),
    hop_size: Optional[int] = typer.Option(
        None, "--hop-size", help="Samples between frames (default: fft-size / 4)"
    ),
):
    """Show information about an audio file."""
    from .input import AudioLoader
    from .analysis.spectrogram import frame_count

    hop_size = _validate_transform(fft_size, hop_size)

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        details = AudioLoader().describe(str(input_file))
    except (ValueError, RuntimeError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Audio Info:[/bold] {input_file.name}")
    console.print(f"  Format: {details.format}")
    console.print(f"  Duration: {details.duration:.2f} seconds")
    console.print(f"  Sample rate: {details.sample_rate} Hz")
    console.print(f"  Channels: {details.channels} (analysis uses channel 0)")
    console.print(f"  Samples: {details.frames:,}")
    console.print(
        f"  Frames at n_fft={fft_size}, hop={hop_size}: "
        f"{frame_count(details.frames, fft_size, hop_size):,}"
    )
    console.print(f"  Bin width: {details.sample_rate / fft_size:.2f} Hz")


def _show_notes_table(notes):
    """Display notes in a table."""
    table = Table(title="Detected Notes")
    table.add_column("Pitch", style="cyan")
    table.add_column("Onset (s)", style="green")
    table.add_column("Duration (s)", style="yellow")
    table.add_column("Confidence", style="magenta")

    for note in notes:
        table.add_row(
            note.pitch_name,
            f"{note.onset:.3f}",
            f"{note.duration:.3f}",
            f"{note.confidence:.2f}",
        )

    console.print(table)


def _show_spectrum_table(bins):
    """Display (frequency, magnitude) pairs with their nearest notes."""
    from .core import frequency_to_note, format_note, is_valid_musical_frequency

    table = Table(title="Strongest Frequencies")
    table.add_column("Frequency (Hz)", style="cyan")
    table.add_column("Note", style="green")
    table.add_column("Magnitude", style="magenta")

    for freq, magnitude in bins:
        note = (
            format_note(frequency_to_note(freq))
            if is_valid_musical_frequency(freq)
            else "-"
        )
        table.add_row(f"{freq:.1f}", note, f"{magnitude:.3f}")

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
