"""
Synthetic Track Dataset Generator
Writes a CSV in the table's column order, ready for ``track-analytics load``.
"""

import argparse
from pathlib import Path

from track_analytics.data import TrackGenerator

OUTPUT_DIR = Path(__file__).parent.parent / "data" / "generated"


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic track dataset")
    parser.add_argument("--rows", type=int, default=20000, help="Number of rows (default: 20000)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--output", type=Path, default=OUTPUT_DIR / "tracks.csv", help="Output CSV path")
    args = parser.parse_args()

    print(f"📊 Generating {args.rows:,} tracks...")
    df = TrackGenerator(seed=args.seed).generate(args.rows)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    df.write_csv(args.output)

    size = args.output.stat().st_size / 1024 / 1024
    print(f"   ✅ {args.output.name}: {df.height:,} rows ({size:.2f} MB)")
    print(f"   🎤 {df['artist'].n_unique():,} artists, {df['album'].n_unique():,} albums")


if __name__ == "__main__":
    main()
