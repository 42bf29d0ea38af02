#!/usr/bin/env python3
"""
Main entry point for the LF TPC PID workflow.

Resolves Bethe-Bloch coefficients per species, checks the requested
tables against the enabled branches, then fills the compact and full
PID tables for every track of the input file.
"""

import sys
import os
import logging
import argparse
import yaml

from tpcpid.domain.config import PipelineConfig
from tpcpid.pipeline.executor import PipelineExecutor
from tpcpid.utils.paths import create_timestamped_run_dir, update_config_paths_with_run_dir


def setup_logging(level: str = "INFO"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file."""
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="LF TPC PID - Bethe-Bloch response tables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default configuration
  python main.py

  # Custom config
  python main.py --config my_config.yaml

  # Write into an existing run directory
  python main.py --run-dir ./output/lf_tpc_pid_20260217

  # Dry-run to validate config
  python main.py --dry-run
        """
    )

    parser.add_argument(
        "--config", type=str, default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Validate configuration without running the workflow"
    )
    parser.add_argument(
        "--run-dir", type=str, default=None,
        help="Pre-created run directory (skips timestamped dir creation)"
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("LF TPC PID")
    logger.info("=" * 60)

    try:
        logger.info(f"Loading configuration from: {args.config}")
        config_dict = load_config(args.config)

        if args.run_dir:
            run_dir = args.run_dir
            os.makedirs(run_dir, exist_ok=True)
            logger.info(f"Using run directory: {run_dir}")
        else:
            run_metadata = config_dict.get('run_metadata') or {}
            run_name = run_metadata.get('run_name', 'lf_tpc_pid')
            base_output = run_metadata.get('base_output_dir', './output')
            run_dir = create_timestamped_run_dir(base_output, run_name)
            logger.info(f"Created timestamped run directory: {run_dir}")

        config_dict = update_config_paths_with_run_dir(config_dict, run_dir)

        config = PipelineConfig.from_dict(config_dict)
        logger.info("Configuration loaded and validated successfully")

        if args.dry_run:
            logger.info("Dry run mode - configuration is valid, exiting")
            logger.info(f"Enabled branches: {[f'{s.label}/{m}' for s, m in config.branches.enabled_branches()]}")
            logger.info(f"Required tables: {sorted(config.required_tables)}")
            logger.info(f"Run directory: {run_dir}")
            return 0

        executor = PipelineExecutor(config)
        final_context = executor.run()
        executor.save_run_summary(run_dir, final_context)

        if final_context.is_successful:
            logger.info("Workflow completed successfully")
            return 0
        else:
            logger.error(f"Workflow failed: {final_context.error_message}")
            return 1

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
