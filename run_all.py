"""
Run All Steps
==============
Execute the full influence network pipeline:
  Step 1: Build the network from the CSV
  Step 2: Reduce it to the top-K most connected nodes
  Step 3: Analysis tables
  Step 4: Interactive visualisation

Usage:
    python run_all.py                # Full pipeline from scratch
    python run_all.py --skip 1       # Skip step 1 (use existing graph JSON)
    python run_all.py --only 3 4     # Run only steps 3 and 4
    python run_all.py --csv https://example.org/network.csv --max-nodes 30
"""

import argparse
import time

from config import DATA_CSV_PATH, MAX_NODES


def run_step(step_num, skip_set, only_set):
    """Check if step should run based on --skip and --only flags."""
    if only_set and step_num not in only_set:
        return False
    if step_num in skip_set:
        return False
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description='Run influence network pipeline')
    parser.add_argument('--skip', nargs='+', type=int, default=[],
                        help='Steps to skip (e.g., --skip 1 2)')
    parser.add_argument('--only', nargs='+', type=int, default=[],
                        help='Run only these steps (e.g., --only 3 4)')
    parser.add_argument('--csv', default=DATA_CSV_PATH, help='CSV path or URL for step 1')
    parser.add_argument('--max-nodes', type=int, default=MAX_NODES, help='Node cap for step 2')
    args = parser.parse_args(argv)

    skip = set(args.skip)
    only = set(args.only)

    start = time.time()
    print("=" * 60)
    print("  Influence Network Pipeline")
    print("=" * 60)

    # Step 1
    if run_step(1, skip, only):
        print("\n>>> Step 1: Build Network")
        from step1_build_graph import main as step1_main
        step1_main(['--csv', str(args.csv)])
    else:
        print("\n>>> Step 1: SKIPPED")

    # Step 2
    if run_step(2, skip, only):
        print("\n>>> Step 2: Optimize")
        from step2_optimize import main as step2_main
        step2_main(['--max-nodes', str(args.max_nodes)])
    else:
        print("\n>>> Step 2: SKIPPED")

    # Step 3
    if run_step(3, skip, only):
        print("\n>>> Step 3: Analysis")
        from step3_analysis import main as step3_main
        step3_main([])
    else:
        print("\n>>> Step 3: SKIPPED")

    # Step 4
    if run_step(4, skip, only):
        print("\n>>> Step 4: Interactive Visualisation")
        from step4_visualize import main as step4_main
        step4_main([])
    else:
        print("\n>>> Step 4: SKIPPED")

    elapsed = time.time() - start
    print(f"\n{'=' * 60}")
    print(f"  Pipeline complete in {elapsed:.1f}s")
    print(f"{'=' * 60}")


if __name__ == '__main__':
    main()
