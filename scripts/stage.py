#!/usr/bin/env python3
"""
Quick data staging script.

Runs only the init script of a job configuration, e.g. to prepare a local
namespace before testing a Spark job in client mode.

Usage:
    python scripts/stage.py examples/hashtags.properties --filesystem local
    python scripts/stage.py --preset local --root ./data/hdfs
"""

import argparse
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hadoop_tasklets import JobConfig, TaskletJob
from hadoop_tasklets.utils import setup_logging


def main():
    parser = argparse.ArgumentParser(description="Stage input data for a job")
    parser.add_argument(
        "config",
        nargs="?",
        help="Job configuration (.yaml or .properties)",
    )
    parser.add_argument(
        "--preset",
        choices=["hashtags", "pig-password", "local"],
        default=None,
        help="Configuration preset",
    )
    parser.add_argument(
        "--filesystem",
        choices=["hdfs", "local", "memory"],
        default=None,
        help="Filesystem client override",
    )
    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Namespace root for the local filesystem",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args()
    if bool(args.config) == bool(args.preset):
        parser.error("pass either a config file or --preset")

    # Setup logging
    setup_logging("DEBUG" if args.verbose else "INFO")

    # Create config
    config = JobConfig.from_preset(args.preset) if args.preset else JobConfig.from_file(args.config)
    if args.filesystem:
        config.hadoop.filesystem = args.filesystem
    if args.root:
        config.hadoop.local_root = args.root

    print(f"\nStaging {config.local_data} into {config.input_dir}")
    print(f"Filesystem: {config.hadoop.filesystem}\n")

    result = TaskletJob(config).run_init_script()

    print(f"init-script: {result.status.value}")
    if not result.succeeded:
        print(f"  {result.diagnostic}")
        sys.exit(1)


if __name__ == "__main__":
    main()
