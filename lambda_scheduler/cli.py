"""
Command-line interface for scheduling a Lambda function.

Modes (mutually exclusive):
- default: schedule the function on its EventBridge rule
- -d/--delete: unschedule the function and delete the schedule resources
- -t/--toggle: enable/disable the schedule
"""

import argparse
import logging
import sys
from pathlib import Path

from lambda_scheduler import __version__
from lambda_scheduler.config import SchedulerConfig
from lambda_scheduler.errors import ScheduleError
from lambda_scheduler.service import LambdaScheduleService

logger = logging.getLogger(__name__)


def setup_logging(log_file: str = None, verbose: bool = False, level: str = "INFO"):
    """
    Setup logging configuration.

    Returns:
        The handlers added to the root logger
    """
    level = logging.DEBUG if verbose else getattr(logging, str(level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    handlers = []

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(console_formatter)

    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)
    handlers.append(console_handler)

    # botocore is chatty at DEBUG
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    # File handler
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)
        handlers.append(file_handler)

    return handlers


def cmd_schedule(service: LambdaScheduleService) -> int:
    """Schedule the Lambda function."""
    settings = service.settings
    try:
        logger.info(f"Scheduling Lambda function {settings.function_name}...")
        rule = service.schedule()
        logger.info(f"Rule {rule.name} runs {rule.schedule_expression}")
        logger.info("Done")
        return 0
    except ScheduleError as e:
        logger.error(f"Operation failed: {e}")
        return 1


def cmd_delete(service: LambdaScheduleService) -> int:
    """Unschedule the Lambda function and delete the schedule resources."""
    result = service.unschedule()
    if result.clean:
        logger.info("Deleted all schedule resources")
    else:
        # Cleanup is advisory; report what was left behind but succeed
        logger.warning(
            f"Deleted schedule resources with {len(result.errors)} error(s); "
            "some resources may not have existed"
        )
    return 0


def cmd_toggle(service: LambdaScheduleService) -> int:
    """Toggle the state of the scheduled rule (enable/disable)."""
    try:
        state = service.toggle()
        logger.info(f"Toggled scheduled Lambda function to {state}")
        return 0
    except ScheduleError as e:
        logger.error(f"Operation failed: {e}")
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='schedule-lambda',
        description="Invoke an existing AWS Lambda function on an EventBridge schedule",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "With no mode option the function is scheduled.\n"
            "Settings come from --config, LAMBDA_SCHEDULER_* variables or defaults."
        )
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        '-d', '--delete',
        action='store_true',
        default=False,
        help='Unschedule the function and delete the schedule resources'
    )
    mode.add_argument(
        '-t', '--toggle',
        action='store_true',
        default=False,
        help='Enable/disable schedule'
    )

    parser.add_argument(
        '-c', '--config',
        type=str,
        help='Path to JSON configuration file'
    )
    parser.add_argument(
        '--region',
        type=str,
        help='AWS region of the function and rule'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    # Exits with 0 for --help/--version and 2 for usage errors
    args = parser.parse_args(argv)

    try:
        config = SchedulerConfig(args.config)
        config.apply(region=args.region)
    except Exception as e:
        setup_logging(log_file=args.log_file, verbose=args.verbose)
        logger.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    setup_logging(
        log_file=args.log_file or config.logging.file,
        verbose=args.verbose,
        level=config.logging.level
    )

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Invalid configuration: {error}")
        sys.exit(1)

    service = LambdaScheduleService(config.settings)

    if args.delete:
        sys.exit(cmd_delete(service))
    if args.toggle:
        sys.exit(cmd_toggle(service))
    sys.exit(cmd_schedule(service))


if __name__ == '__main__':
    main()
