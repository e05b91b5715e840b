"""Entry point for the src module. Enables python -m src."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from src.settings import get_masked_settings, settings
from src.stats import (
    DIMENSION_LABELS,
    AggregateBucket,
    BucketSet,
    MediaMetadata,
    StatsSnapshot,
    parse_dimension,
)
from src.utils import setup_logger

ALL_SETS = "all"


def load_json(path: Path) -> Any:
    """Read a JSON file."""
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def load_metadata(path: Path) -> dict[str, MediaMetadata | None]:
    """Read a catalog export (a list of media documents) keyed by id."""
    metadata: dict[str, MediaMetadata | None] = {}
    for item in load_json(path):
        media = MediaMetadata.model_validate(item)
        metadata[media.target_id] = media
    return metadata


def run_init_db() -> None:
    """Check connectivity and create the database schema."""
    from src.database import ViewingRepository, get_database

    db = get_database()
    if not db.check_connection():
        raise ConnectionError("Cannot connect to the viewing store database")

    db.create_schema()
    with db.session() as session:
        stored = ViewingRepository(session).count()
    print(f"✅ Schema created ({stored} viewings stored)")


def run_import(path: Path) -> None:
    """Store viewings from a JSON export, one strictly validated write each."""
    from pydantic import ValidationError

    from src.database import init_database
    from src.services import ViewingService

    documents = load_json(path)
    imported = 0
    rejected = 0

    db = init_database()
    with db.session() as session:
        service = ViewingService(session)
        for document in documents:
            try:
                service.add(document)
                imported += 1
            except ValidationError as e:
                rejected += 1
                doc_id = document.get("id", "?") if isinstance(document, dict) else "?"
                print(f"⚠️  Rejected {doc_id}: {e.error_count()} error(s)")

    print(f"✅ {imported} viewings imported, {rejected} rejected")


def build_snapshot(input_path: Path | None, catalog_path: Path | None) -> StatsSnapshot:
    """Aggregate either a JSON export or the database."""
    if input_path is not None:
        from src.stats import StatsEngine

        metadata = load_metadata(catalog_path) if catalog_path else {}
        return StatsEngine().aggregate(load_json(input_path), metadata)

    from src.database import init_database
    from src.services import StatsService

    with init_database().session() as session:
        return StatsService(session).build_snapshot()


def format_row(position: int, bucket: AggregateBucket, dimension: str) -> str:
    """Format one ranked bucket as a table line."""
    title = bucket.display_title
    if bucket.display_subtitle:
        title = f"{title} ({bucket.display_subtitle})"
    return f"  {position:>2}. {bucket.average(dimension):>4.1f}  {title}  [n={bucket.sample_count}]"


def run_stats(
    input_path: Path | None,
    catalog_path: Path | None,
    bucket_set: str,
    dimension: str,
    limit: int,
) -> None:
    """Print ranked lists for one dimension."""
    dim = parse_dimension(dimension)
    snapshot = build_snapshot(input_path, catalog_path)

    sets = list(BucketSet) if bucket_set == ALL_SETS else [BucketSet(bucket_set)]
    for current in sets:
        rows = snapshot.rank(current, dim, limit)
        print(f"\n📊 Top {current.value} by {DIMENSION_LABELS[dim]}")
        if not rows:
            print("  (no viewings)")
        for position, bucket in enumerate(rows, start=1):
            print(format_row(position, bucket, dim))

    stats = snapshot.stats
    print(
        f"\n{stats.accepted} viewings used, {stats.skipped} skipped, "
        f"{stats.defaulted} with defaults, {stats.cleared} with cleared fields"
    )


def require_tmdb() -> None:
    """Fail early when no TMDB API key is set."""
    if not settings.tmdb.is_configured:
        raise ValueError("TMDB_API_KEY is not configured")


def run_search(query: str) -> None:
    """Search TMDB for movies and shows."""
    from src.catalog import CatalogService, TMDBClient
    from src.database import init_database

    require_tmdb()
    db = init_database()
    with TMDBClient() as client, db.session() as session:
        results = CatalogService(session, client).search(query)

    print(f"🔍 {len(results)} results for {query!r}")
    for item in results:
        title = item.get("title") or item.get("name") or "?"
        year = (item.get("release_date") or item.get("first_air_date") or "")[:4] or "?"
        print(f"  {item['media_type']:<5} {item['id']:>8}  {title} ({year})")


def run_episodes(tmdb_id: int, season_number: int) -> None:
    """List the episodes of one TV season."""
    from src.catalog import CatalogService, TMDBClient
    from src.database import init_database

    require_tmdb()
    db = init_database()
    with TMDBClient() as client, db.session() as session:
        episodes = CatalogService(session, client).season_episodes(tmdb_id, season_number)

    print(f"📺 Season {season_number}: {len(episodes)} episodes")
    for number, title in episodes:
        print(f"  E{number:>2}  {title}")


def run_add_media(tmdb_id: int, media_type: str, user_id: str) -> None:
    """Add a TMDB title to the catalog."""
    from src.catalog import CatalogService, TMDBClient
    from src.database import init_database

    require_tmdb()
    db = init_database()
    with TMDBClient() as client, db.session() as session:
        item = CatalogService(session, client).upsert_from_tmdb(tmdb_id, media_type, user_id)
        print(f"✅ {item.id}: {item.title} ({item.year or '?'})")


def main(argv: list[str] | None = None) -> None:
    """Main CLI."""
    parser = argparse.ArgumentParser(
        description="FrightLog - family horror viewing log and rankings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src init-db                            # Create schema
  python -m src import viewings.json               # Import viewings
  python -m src stats --dimension gore             # Rank from database
  python -m src stats --input viewings.json --set episode
  python -m src add-media 694 --type movie --user uid-1
  python -m src search "the shining"
  python -m src episodes 1399 --season 1
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command")

    # Schema
    subparsers.add_parser("init-db", help="Create database schema")

    # Import
    import_parser = subparsers.add_parser("import", help="Import viewings from JSON")
    import_parser.add_argument("file", type=Path)

    # Stats
    stats_parser = subparsers.add_parser("stats", help="Ranked statistics")
    stats_parser.add_argument("--input", type=Path, help="Viewings JSON instead of database")
    stats_parser.add_argument("--catalog", type=Path, help="Media JSON for titles")
    stats_parser.add_argument(
        "--set",
        dest="bucket_set",
        default=ALL_SETS,
        choices=[*(s.value for s in BucketSet), ALL_SETS],
    )
    stats_parser.add_argument("--dimension", default="overall")
    stats_parser.add_argument("--limit", type=int, default=settings.stats.default_limit)

    # Catalog
    media_parser = subparsers.add_parser("add-media", help="Add a TMDB title")
    media_parser.add_argument("tmdb_id", type=int)
    media_parser.add_argument("--type", dest="media_type", choices=["movie", "tv"], default="movie")
    media_parser.add_argument("--user", dest="user_id", required=True)

    search_parser = subparsers.add_parser("search", help="Search TMDB titles")
    search_parser.add_argument("query")

    episodes_parser = subparsers.add_parser("episodes", help="List episodes of a TV season")
    episodes_parser.add_argument("tmdb_id", type=int)
    episodes_parser.add_argument("--season", type=int, default=1)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    settings.paths.ensure_directories()
    log = setup_logger(
        "src",
        settings.logging.level,
        settings.paths.project_root / settings.logging.log_dir,
    )
    log.debug("Settings: %s", get_masked_settings())

    try:
        if args.command == "init-db":
            run_init_db()
        elif args.command == "import":
            run_import(args.file)
        elif args.command == "stats":
            run_stats(args.input, args.catalog, args.bucket_set, args.dimension, args.limit)
        elif args.command == "add-media":
            run_add_media(args.tmdb_id, args.media_type, args.user_id)
        elif args.command == "search":
            run_search(args.query)
        elif args.command == "episodes":
            run_episodes(args.tmdb_id, args.season)

    except KeyboardInterrupt:
        print("\n⚠️  Interrupted")
        sys.exit(130)
    except Exception as e:
        print(f"\n❌ ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
