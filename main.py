"""
CupManager - Football Tournament Manager

Command-line entry point for administering a tournament.
"""

import argparse
import sys

from config import init_config, APP_NAME, APP_VERSION


def _print_table(rows) -> None:
    print(f"{'#':>3}  {'Team':<24}{'P':>4}{'W':>4}{'D':>4}{'L':>4}{'GF':>5}{'GA':>5}{'GD':>5}{'Pts':>5}")
    for row in rows:
        print(
            f"{row.rank:>3}  {row.team_name:<24}{row.played:>4}{row.won:>4}{row.drawn:>4}"
            f"{row.lost:>4}{row.goals_for:>5}{row.goals_against:>5}{row.goal_difference:>5}{row.points:>5}"
        )


def _fail(outcome) -> int:
    print(f"error [{outcome.kind.value}]: {outcome.error}", file=sys.stderr)
    return 1


def cmd_init_db(args, api) -> int:
    from models.base import init_db, reset_db
    if args.reset:
        reset_db()
        print("Database reset")
    else:
        init_db()
        print("Database initialized")
    return 0


def cmd_standings(args, api) -> int:
    outcome = api.recompute_standings() if args.recompute else api.get_standings()
    if not outcome.success:
        return _fail(outcome)
    _print_table(outcome.data)
    return 0


def cmd_phase(args, api) -> int:
    outcome = api.current_phase()
    if not outcome.success:
        return _fail(outcome)
    print(outcome.data.value)
    return 0


def cmd_schedule(args, api) -> int:
    outcome = api.generate_group_schedule()
    if not outcome.success:
        return _fail(outcome)
    rounds = {m.round_number for m in outcome.data}
    print(f"Created {len(outcome.data)} group matches over {len(rounds)} rounds")
    return 0


def cmd_advance(args, api) -> int:
    outcome = api.advance()
    if not outcome.success:
        return _fail(outcome)
    for match in outcome.data:
        leg = f" (leg {match.leg})" if match.leg else ""
        print(f"{match.phase.value} #{match.bracket_position}: {match.home_team_id} v {match.away_team_id}{leg}")
    return 0


def cmd_audit(args, api) -> int:
    """Compare live statistics with a rebuild from match history."""
    outcome = api.standings_drift()
    if not outcome.success:
        return _fail(outcome)
    if not outcome.data:
        print("Team statistics match the match history")
        return 0

    print(f"Statistics drift for teams: {', '.join(str(t) for t in outcome.data)}")
    if args.repair:
        repaired = api.rebuild_team_stats()
        if not repaired.success:
            return _fail(repaired)
        print(f"Rebuilt statistics for {len(repaired.data)} team(s)")
        return 0
    return 1


def cmd_export(args, api) -> int:
    from services.api import as_outcome
    from services.export import StandingsExporter

    outcome = api.get_standings()
    if not outcome.success:
        return _fail(outcome)

    exporter = StandingsExporter(APP_NAME)
    ok = exporter.export_standings_csv(outcome.data, args.path)
    if ok and args.scorers:
        scorers = as_outcome(api.service.top_scorers)()
        if not scorers.success:
            return _fail(scorers)
        ok = exporter.export_scorers_csv(scorers.data, args.scorers)
    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cupmanager", description=f"{APP_NAME} tournament manager")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("init-db", help="Create the database tables")
    p.add_argument("--reset", action="store_true", help="Drop and recreate all tables")
    p.set_defaults(func=cmd_init_db)

    p = subparsers.add_parser("standings", help="Show the league table")
    p.add_argument("--recompute", action="store_true", help="Rebuild from match history")
    p.set_defaults(func=cmd_standings)

    p = subparsers.add_parser("phase", help="Show the current phase")
    p.set_defaults(func=cmd_phase)

    p = subparsers.add_parser("schedule", help="Generate the round-robin group fixtures")
    p.set_defaults(func=cmd_schedule)

    p = subparsers.add_parser("advance", help="Generate the next phase's fixtures")
    p.set_defaults(func=cmd_advance)

    p = subparsers.add_parser("audit", help="Check team statistics against match history")
    p.add_argument("--repair", action="store_true", help="Overwrite drifted statistics")
    p.set_defaults(func=cmd_audit)

    p = subparsers.add_parser("export-standings", help="Write the standings as CSV")
    p.add_argument("path", help="Output CSV file")
    p.add_argument("--scorers", help="Also write the top scorers to this CSV file")
    p.set_defaults(func=cmd_export)

    return parser


def main(argv=None) -> int:
    """Main entry point for CupManager."""
    args = build_parser().parse_args(argv)

    # Initialize configuration and directories
    init_config()

    from models.base import init_db
    from services.api import TournamentAPI
    if args.command != "init-db":
        init_db()

    return args.func(args, TournamentAPI())


if __name__ == "__main__":
    sys.exit(main())
