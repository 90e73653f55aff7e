#!/usr/bin/env python3
"""
Command-line interface for Pagewright - static page generator.
"""

import argparse
import sys
import time
from typing import List, Optional

from jinja2 import TemplateError

from . import __version__
from .core import Pagewright
from .errors import PagewrightError
from .settings import PagewrightSettings, TaskConfig


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Pagewright - Static Page Generator')
    parser.add_argument('--config', type=str,
                        help='Configuration file (defaults to pagewright.yml/.yaml/.json)')
    parser.add_argument('--target', type=str,
                        help='Build only this configured target')
    parser.add_argument('--src', type=str,
                        help='Directory containing markdown posts')
    parser.add_argument('--dest', type=str,
                        help='Output directory for the generated site')
    parser.add_argument('--url', type=str,
                        help='Post URL template, e.g. blog/:title')
    parser.add_argument('--layout', type=str,
                        help='Template used to render each post')
    parser.add_argument('--data', type=str,
                        help='JSON file exposed to templates as `data`')
    parser.add_argument('--page-src', type=str,
                        help='Directory of page templates rendered with the posts')
    parser.add_argument('--template-engine', type=str,
                        help='Only render pages with this file extension')
    parser.add_argument('--posts-per-page', type=int,
                        help='Number of posts per paginated list page')
    parser.add_argument('--list-page', type=str,
                        help='Template used for the paginated list pages')
    parser.add_argument('--log-dir', type=str,
                        help='Directory for build log files')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def run_targets(tasks: List[TaskConfig], log_dir: Optional[str] = None) -> List[Pagewright]:
    """Build each task in order; the first failure propagates."""
    generators = []
    for task in tasks:
        generator = Pagewright(task, log_dir=log_dir)
        if task.name:
            generator.logger.info(f"Building target {task.name}")
        generator.build()
        generators.append(generator)
    return generators


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    args = create_parser().parse_args(argv)

    # Handle init command
    if args.init:
        try:
            config_path = PagewrightSettings().create_sample_config(args.init)
        except PagewrightError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"Created sample configuration file: {config_path}")
        return

    # Record start time
    overall_start_time = time.time()

    try:
        # Load settings from configuration file
        settings_loader = PagewrightSettings(config_path=args.config)
        settings_loader.load_settings()

        # Command line arguments take precedence
        args_dict = {k: v for k, v in vars(args).items() if v is not None}
        final_settings = settings_loader.merge_with_args(args_dict)

        tasks = settings_loader.task_configs(args.target)
    except (PagewrightError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        generators = run_targets(tasks, log_dir=final_settings.get('log_dir'))
    except (PagewrightError, TemplateError, OSError):
        # Pagewright.build has already logged the error
        sys.exit(1)

    # Show build statistics
    total_time = time.time() - overall_start_time
    logger = generators[-1].logger
    logger.info(f"Site build completed in {total_time:.6f} seconds.")
    logger.info(f"Total posts generated: {sum(g.posts_generated for g in generators)}")
    logger.info(f"Total pages generated: {sum(g.pages_generated for g in generators)}")
    logger.info(
        f"Total paginated pages generated: {sum(g.list_pages_generated for g in generators)}"
    )


if __name__ == '__main__':
    main()
