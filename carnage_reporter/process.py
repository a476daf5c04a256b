"""Post-processing and export of recognized player rows.

Handles:
- Ranking players into places
- Team labels and team totals
- Assembling rows into a DataFrame and exporting to CSV
- A plain-text summary table
- The command-line entry point
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

import pandas as pd

from .errors import CarnageReportError
from .font import load_font
from .recognize import PlayerStats, process_frame
from .utils import DEFAULT_REPORT_PATH, load_screenshot

COLUMN_ORDER = ["name", "place", "team", "score", "kills", "assists", "deaths"]
STAT_COLUMNS = ["score", "kills", "assists", "deaths"]


# -----------------------------------------------------------------------------
# Ranking
# -----------------------------------------------------------------------------


def _rank_key(player: PlayerStats) -> tuple[int, int, int, int]:
    # Larger is better: score, then kills, then fewer deaths, then assists
    return (player.score, player.kills, -player.deaths, player.assists)


def placements(players: Sequence[PlayerStats]) -> list[int]:
    """Compute each player's place.

    A player's place is one more than the number of other players who are
    better or exactly tied on every ranked stat.
    """
    keys = [_rank_key(player) for player in players]
    places = []
    for index, key in enumerate(keys):
        ahead = sum(1 for other, other_key in enumerate(keys) if other != index and other_key >= key)
        places.append(ahead + 1)
    return places


def ordinal(place: int) -> str:
    """Format a place as 1st, 2nd, 3rd, 4th, ..., 11th, 12th, 13th, 21st."""
    suffix = "th"
    if place % 100 not in range(10, 20):
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(place % 10, "th")
    return f"{place}{suffix}"


def is_free_for_all(players: Sequence[PlayerStats]) -> bool:
    """A report is free-for-all when no row was detected as red."""
    return not any(player.red for player in players)


def team_label(player: PlayerStats, free_for_all: bool) -> str:
    if free_for_all:
        return "ffa"
    return "red" if player.red else "blue"


# -----------------------------------------------------------------------------
# DataFrame Assembly
# -----------------------------------------------------------------------------


def team_totals(players: Sequence[PlayerStats]) -> pd.DataFrame:
    """Sum each team's stats.

    Returns:
        DataFrame with one row per team (red first), empty for free-for-all
    """
    if not players or is_free_for_all(players):
        return pd.DataFrame(columns=COLUMN_ORDER)

    dataframe = pd.DataFrame(
        [{"team": team_label(player, False), **_stats(player)} for player in players]
    )
    sums = dataframe.groupby("team")[STAT_COLUMNS].sum().reindex(["red", "blue"], fill_value=0)

    rows = []
    for team, other in (("red", "blue"), ("blue", "red")):
        rows.append(
            {
                "name": f"{team}_team_total",
                "place": "1st" if sums.at[team, "score"] > sums.at[other, "score"] else "2nd",
                "team": team,
                **{stat: int(sums.at[team, stat]) for stat in STAT_COLUMNS},
            }
        )
    return pd.DataFrame(rows, columns=COLUMN_ORDER)


def _stats(player: PlayerStats) -> dict[str, int]:
    return {stat: getattr(player, stat) for stat in STAT_COLUMNS}


def build_dataframe(players: Sequence[PlayerStats]) -> pd.DataFrame:
    """Assemble player rows and team totals into a single DataFrame.

    Args:
        players: Recognized rows in on-screen order

    Returns:
        DataFrame with columns: name, place, team, score, kills, assists, deaths
    """
    free_for_all = is_free_for_all(players)
    rows = [
        {
            "name": player.name,
            "place": ordinal(place),
            "team": team_label(player, free_for_all),
            **_stats(player),
        }
        for player, place in zip(players, placements(players))
    ]

    dataframe = pd.DataFrame(rows, columns=COLUMN_ORDER)
    totals = team_totals(players)
    if not totals.empty:
        dataframe = pd.concat([dataframe, totals], ignore_index=True)

    for column in STAT_COLUMNS:
        dataframe[column] = dataframe[column].astype(int)
    return dataframe


def export_csv(dataframe: pd.DataFrame, output_path: Path) -> None:
    """Export DataFrame to CSV."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    dataframe.to_csv(output_path, index=False)


def format_summary(players: Sequence[PlayerStats]) -> str:
    """Render a fixed-width table of the players and the final team score."""
    free_for_all = is_free_for_all(players)
    lines = [
        "Name                 | Team | Score | Kills | Assists | Deaths",
        "---------------------|------|-------|-------|---------|--------",
    ]
    for player in players:
        team = "FFA" if free_for_all else team_label(player, False).capitalize()
        lines.append(
            f"{player.name:<20} | {team:<4} | {player.score:5d} | {player.kills:5d} "
            f"| {player.assists:7d} | {player.deaths:6d}"
        )

    if not free_for_all:
        red_score = sum(player.score for player in players if player.red)
        blue_score = sum(player.score for player in players if not player.red)
        if red_score > blue_score:
            result = f"Red team wins {red_score} - {blue_score}"
        elif blue_score > red_score:
            result = f"Blue team wins {blue_score} - {red_score}"
        else:
            result = f"Teams are tied {blue_score} - {red_score}"
        lines.extend(["", f"Final score: {result}."])

    return "\n".join(lines)


# -----------------------------------------------------------------------------
# Command Line
# -----------------------------------------------------------------------------


def load_roster(paths: Sequence[Path]) -> list[str]:
    """Read candidate player names, one per line, from each file in order.

    Files are read as Latin-1 so every byte maps to the font code of the
    same value.
    """
    names = []
    for path in paths:
        for line in Path(path).read_text(encoding="latin-1").splitlines():
            if line:
                names.append(line)
    return names


def process_screenshot(
    image_path: Path, font_path: Path, roster_paths: Sequence[Path] = ()
) -> list[PlayerStats]:
    """Load a screenshot and font tag from disk and read every player row."""
    screenshot = load_screenshot(image_path)
    font = load_font(font_path)
    return process_frame(screenshot, font, load_roster(roster_paths))


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="carnage-reporter", description="Read a postgame carnage report screenshot."
    )
    parser.add_argument("image", type=Path, help="Screenshot of the carnage report (480 px tall)")
    parser.add_argument("font", type=Path, help="Font tag the report is rendered with")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=DEFAULT_REPORT_PATH,
        help=f"CSV destination (default: {DEFAULT_REPORT_PATH})",
    )
    parser.add_argument(
        "-n",
        "--names",
        type=Path,
        action="append",
        default=[],
        help="File of candidate player names, one per line (repeatable)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log recognition details")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Read a screenshot, write the CSV report and print a summary."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print(f"Processing: {args.image.name}")
    try:
        players = process_screenshot(args.image, args.font, args.names)
    except (CarnageReportError, OSError) as e:
        print(f"  Error: {e}", file=sys.stderr)
        return 1

    dataframe = build_dataframe(players)
    print(f"Exporting to {args.output}")
    export_csv(dataframe, args.output)

    print()
    print(format_summary(players))
    print(f"\nDone! {len(players)} players read.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
