"""
Command-line interface implementation
"""

import click

from basketball_fusion.analytics.highlights import (
    HighlightFilter, extract_highlights, merge_overlapping_highlights
)
from basketball_fusion.analytics.statistics import generate_team_summary
from basketball_fusion.config import FusionSettings, get_settings
from basketball_fusion.core.exceptions import FusionError
from basketball_fusion.io import load_events, load_signal_bundle, save_events
from basketball_fusion.pipeline import EventFusionPipeline, FusionOptions
from basketball_fusion.utils import setup_logging

# Errors from reading a malformed or unreadable JSON file
LOAD_ERRORS = (FusionError, ValueError, KeyError, TypeError, OSError)


def _load_events(events_path):
    try:
        return load_events(events_path)
    except LOAD_ERRORS as e:
        raise click.ClickException(f"Cannot read events from {events_path}: {e}")


@click.group()
@click.option('--log-level', default='INFO', help='Logging level')
def cli(log_level):
    """Basketball Event Fusion CLI"""
    setup_logging(level=log_level)


@cli.command()
@click.argument('signals_path', type=click.Path(exists=True))
@click.option('--output', default='events.json', help='Events output path')
@click.option('--confidence-floor', default=0.3, type=float, help='Minimum event confidence')
@click.option('--no-3pt', is_flag=True, help='Disable 3-point estimation')
@click.option('--ocr-scoring', is_flag=True, help='Use scoreboard OCR instead of visual scoring')
@click.option('--config', 'config_path', default=None, type=click.Path(exists=True),
              help='Fusion settings JSON file')
def analyze(signals_path, output, confidence_floor, no_3pt, ocr_scoring, config_path):
    """Fuse a clip's detection signals into game events"""

    click.echo(f"Analyzing signals: {signals_path}")

    try:
        settings = FusionSettings.from_file(config_path) if config_path else get_settings()
        options = FusionOptions(
            enable_3pt_estimation=not no_3pt,
            enable_visual_scoring=not ocr_scoring,
            confidence_floor=confidence_floor,
        )
        signals, report = load_signal_bundle(signals_path)
        pipeline = EventFusionPipeline(options, settings)
        events = pipeline.run(signals)
    except (FusionError, ValueError, OSError) as e:
        raise click.ClickException(str(e))

    diagnostics = pipeline.diagnostics.to_dict()
    diagnostics['ingest'] = report.to_dict()
    save_events(events, output, diagnostics)

    # Summary
    click.echo("\nAnalysis complete!")
    click.echo(f"Clip duration: {signals.clip_duration:.1f}s")
    click.echo(f"Dropped malformed records: {report.total_dropped}")
    click.echo(f"Total events: {len(events)}")
    for warning in pipeline.diagnostics.warnings:
        click.echo(f"  fallback {warning}")
    click.echo(f"\nEvents saved to: {output}")


@cli.command()
@click.argument('events_path', type=click.Path(exists=True))
@click.option('--format', type=click.Choice(['summary', 'teams', 'events']),
              default='summary', help='What to show')
def show(events_path, format):
    """Show fused events"""

    events = _load_events(events_path)
    team_ids = sorted({e.team_id for e in events})

    if format == 'summary':
        click.echo("=== Event Summary ===")
        click.echo(f"Events: {len(events)}")
        if events:
            click.echo(f"Span: {events[0].timestamp:.1f}s - {events[-1].timestamp:.1f}s")
        counts = {}
        for event in events:
            counts[event.type.value] = counts.get(event.type.value, 0) + 1
        for event_type, count in sorted(counts.items()):
            click.echo(f"  {event_type}: {count}")

    elif format == 'teams':
        click.echo("=== Team Statistics ===")
        for team_id in team_ids:
            summary = generate_team_summary(events, team_id).to_dict()
            players = summary.pop('players')
            click.echo(f"\nTeam {team_id}:")
            for stat, value in summary.items():
                if stat != 'team_id':
                    click.echo(f"  {stat}: {value}")
            for player in players:
                click.echo(f"  #{player['player_id']}: {player['points']} pts, "
                           f"{player['shot_attempts']} att, {player['hit_rate']}%")

    elif format == 'events':
        click.echo("=== Events ===")
        for event in events:
            player = f" #{event.player_id}" if event.player_id else ""
            click.echo(f"{event.timestamp:7.2f}s  {event.type.value:<22} {event.team_id}{player}  "
                       f"{event.confidence:.2f}  [{event.source}]")


@cli.command()
@click.argument('events_path', type=click.Path(exists=True))
@click.option('--player', 'player_ids', multiple=True, help='Only these player ids')
@click.option('--team', 'team_ids', multiple=True, help='Only these teams')
@click.option('--min-confidence', default=None, type=float, help='Minimum event confidence')
@click.option('--before', default=3.0, help='Seconds before each event')
@click.option('--after', default=2.0, help='Seconds after each event')
@click.option('--merge', is_flag=True, help='Merge overlapping clips')
def highlights(events_path, player_ids, team_ids, min_confidence, before, after, merge):
    """List highlight clips around significant events"""

    events = _load_events(events_path)
    highlight_filter = HighlightFilter(
        player_ids=list(player_ids), team_ids=list(team_ids), min_confidence=min_confidence
    )
    clips = extract_highlights(events, before, after, highlight_filter)
    if merge:
        clips = merge_overlapping_highlights(clips)

    click.echo(f"=== Highlights ({len(clips)}) ===")
    for clip in clips:
        click.echo(f"{clip.start_time:7.2f}s - {clip.end_time:7.2f}s  {clip.description}")


@cli.command('init-config')
@click.argument('config_path', type=click.Path())
def init_config(config_path):
    """Write the default fusion settings to a JSON file"""
    FusionSettings().save(config_path)
    click.echo(f"Default settings written to: {config_path}")


if __name__ == '__main__':
    cli()
