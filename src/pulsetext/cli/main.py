"""
Command-line interface for pulsetext.

Provides commands for scoring single texts, batch-scoring collected
articles, inspecting the keyword tables and running the proxy server.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import click
import pandas as pd
from tqdm import tqdm

from pulsetext.config import load_config, validate_config
from pulsetext.detection.constituency_detector import create_detector
from pulsetext.detection.rollup import build_summary, score_articles
from pulsetext.detection.topic_analyzer import create_analyzer

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging",
)
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Pulsetext election topic analysis tool.

    Score news and social text for election topics, party sentiment and
    constituency mentions.
    """
    ctx.ensure_object(dict)

    ctx.obj["config"] = load_config(config_path=config) if config else load_config()

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _analysis_tools(ctx: click.Context):
    config = ctx.obj["config"]
    if "analyzer" not in ctx.obj:
        ctx.obj["analyzer"] = create_analyzer(config.analysis)
        ctx.obj["detector"] = create_detector(config.analysis)
    return ctx.obj["analyzer"], ctx.obj["detector"]


@cli.command()
@click.argument("text")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
@click.pass_context
def analyze(ctx: click.Context, text: str, as_json: bool) -> None:
    """Analyze a text for election topics and party impact.

    Example:
        pulsetext analyze "TMC denies Sandeshkhali violence claims"
    """
    try:
        analyzer, detector = _analysis_tools(ctx)
        result = analyzer.analyze(text)
        match = detector.detect(text)

        if as_json:
            output = result.to_dict()
            output["constituency"] = match.to_dict() if match else None
            click.echo(json.dumps(output, indent=2, ensure_ascii=False))
            return

        label_a = analyzer.party_label("party_a")
        label_b = analyzer.party_label("party_b")

        click.echo("\n=== Election Topic Analysis ===")
        for topic_result in result.topics:
            if not topic_result.detected:
                continue
            click.echo(f"\n{topic_result.label}:")
            click.echo(
                f"  {label_a}: {topic_result.party_a_impact.value} "
                f"({topic_result.party_a_score:+.2f})"
            )
            click.echo(
                f"  {label_b}: {topic_result.party_b_impact.value} "
                f"({topic_result.party_b_score:+.2f})"
            )
            for keyword in topic_result.matched_keywords:
                click.echo(f"    - {keyword}")

        if not result.detected_topics:
            click.echo("\nNo election topics detected")

        click.echo(f"\n{label_a} total: {result.party_a_total_score:+.2f} "
                   f"(seat impact {result.party_a_seat_impact:+.2f})")
        click.echo(f"{label_b} total: {result.party_b_total_score:+.2f} "
                   f"(seat impact {result.party_b_seat_impact:+.2f})")

        click.echo(f"Dominant party: {analyzer.party_label(result.dominant_party)}")
        click.echo(f"Constituency: {match.name if match else 'none'}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Analysis failed")
        sys.exit(1)


@cli.command()
@click.argument("text")
@click.pass_context
def topics(ctx: click.Context, text: str) -> None:
    """Print a presence flag per election topic.

    Example:
        pulsetext topics "Rising unemployment among Bengal youth"
    """
    try:
        analyzer, _ = _analysis_tools(ctx)
        for topic, detected in analyzer.detect_topics(text).items():
            click.echo(f"{topic}: {'yes' if detected else 'no'}")
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Topic detection failed")
        sys.exit(1)


@cli.command()
@click.argument("text")
@click.option("--all", "show_all", is_flag=True, help="List every matching constituency")
@click.pass_context
def detect(ctx: click.Context, text: str, show_all: bool) -> None:
    """Detect the constituency a text refers to.

    Example:
        pulsetext detect "Roadshow in Bhowanipore tonight"
    """
    try:
        _, detector = _analysis_tools(ctx)
        if show_all:
            matches = detector.detect_all(text)
        else:
            match = detector.detect(text)
            matches = [match] if match else []

        if not matches:
            click.echo("No constituency detected")
            return

        for match in matches:
            click.echo(f"{match.id}: {match.name} ({match.district})")
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Constituency detection failed")
        sys.exit(1)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Output file path",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "csv", "parquet"]),
    default="json",
    help="Output format (default: json)",
)
@click.option(
    "--days-back",
    type=int,
    default=None,
    help="Only include articles published within this many days",
)
@click.option(
    "--constituency",
    default=None,
    help="Only include articles about this constituency (id or name)",
)
@click.pass_context
def batch(
    ctx: click.Context,
    input_file: str,
    output: str | None,
    format: str,
    days_back: int | None,
    constituency: str | None,
) -> None:
    """Score a file of collected articles and summarize by topic.

    Takes a JSON file with a list of articles (or ``{"items": [...]}``) and
    writes one scored row per article.

    Example:
        pulsetext batch data/raw/news.json -o data/processed/scored.csv -f csv
    """
    config = ctx.obj["config"]

    if output is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        config.storage.processed_data_path.mkdir(parents=True, exist_ok=True)
        output = str(config.storage.processed_data_path / f"scored_{timestamp}.{format}")

    click.echo(f"Loading data from: {input_file}")

    try:
        with open(input_file, encoding="utf-8") as f:
            data = json.load(f)

        items = data.get("items", data) if isinstance(data, dict) else data

        if not items:
            click.echo("Error: No items found in input file", err=True)
            sys.exit(1)

        click.echo(f"Found {len(items)} items to process")

        analyzer, detector = _analysis_tools(ctx)

        scored = score_articles(
            tqdm(items, desc="Scoring"),
            analyzer,
            detector=detector,
            constituency=constituency,
            days_back=days_back,
        )

        rows = []
        for item in scored:
            result = item.analysis
            rows.append({
                "id": item.article.get("id"),
                "text": item.text,
                "constituency": item.constituency.name if item.constituency else None,
                "detected_topics": ",".join(t.value for t in result.detected_topics),
                "party_a_total_score": result.party_a_total_score,
                "party_b_total_score": result.party_b_total_score,
                "party_a_seat_impact": result.party_a_seat_impact,
                "party_b_seat_impact": result.party_b_seat_impact,
                "dominant_party": result.dominant_party.value,
            })

        summary = build_summary(scored, analyzer, constituency=constituency, days_back=days_back)

        click.echo(f"\nScored {len(rows)} items ({len(items) - len(rows)} filtered)")

        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if format == "json":
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(
                    {
                        "metadata": {
                            "source_file": input_file,
                            "items_processed": len(items),
                            "items_kept": len(rows),
                            "days_back": days_back,
                            "constituency": constituency,
                            "party_labels": dict(analyzer.topics.party_labels),
                            "timestamp": datetime.now().isoformat(),
                        },
                        "summary": summary.to_dict(),
                        "items": rows,
                    },
                    f,
                    indent=2,
                    ensure_ascii=False,
                    default=str,
                )
        elif format == "parquet":
            df = pd.DataFrame(rows)
            df.to_parquet(output_path, compression="snappy")
        elif format == "csv":
            df = pd.DataFrame(rows)
            df.to_csv(output_path, index=False)

        click.echo(f"Output saved to: {output_path}")

        click.echo("\n=== Topic Summary ===")
        for topic in summary.topics:
            if topic.mentions:
                click.echo(
                    f"  {topic.label}: {topic.mentions} mentions, "
                    f"{topic.overall_sentiment.value}"
                )
        click.echo(
            f"  Dominant: {analyzer.party_label('party_a')}={summary.party_a_dominant}, "
            f"{analyzer.party_label('party_b')}={summary.party_b_dominant}, "
            f"neutral={summary.neutral}"
        )

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Batch scoring failed")
        sys.exit(1)


@cli.command()
@click.pass_context
def keywords(ctx: click.Context) -> None:
    """Show the loaded keyword tables."""
    try:
        analyzer, detector = _analysis_tools(ctx)

        click.echo("\n=== Topic Keywords ===")
        for topic_data in analyzer.get_all_topic_keywords():
            click.echo(f"\n{topic_data.label} ({topic_data.topic.value}):")
            for list_name, words in topic_data.keyword_lists().items():
                click.echo(f"  {list_name}: {len(words)}")

        click.echo("\n=== Constituencies ===")
        for entry in detector.get_all_constituency_keywords():
            click.echo(f"  {entry.id}: {entry.name}, {entry.district} ({len(entry.keywords)} aliases)")

        issues = validate_config(ctx.obj["config"])
        if issues:
            click.echo("\n=== Configuration Issues ===")
            for issue in issues:
                click.echo(f"  - {issue}")
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Keyword listing failed")
        sys.exit(1)


@cli.command()
@click.option("--host", default=None, help="Bind address (default from config)")
@click.option("--port", type=int, default=None, help="Port (default from config)")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the API proxy server.

    Example:
        pulsetext serve --port 3001
    """
    import uvicorn

    from pulsetext.proxy.app import create_app

    config = ctx.obj["config"]
    for issue in validate_config(config):
        logger.warning(issue)

    app = create_app(config)
    host = host or config.server.host
    port = port or config.server.port
    click.echo(f"Proxy listening on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=config.log_level.lower())


def main() -> None:
    """Main entry point for the pulsetext CLI."""
    cli()


if __name__ == "__main__":
    main()
