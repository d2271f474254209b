"""
Silver Conformer - Main Entry Point

This is the command-line interface for the silver layer load. It reads each
bronze table, conforms it, reports data quality issues and fully reloads the
matching silver table. It can be called directly from the terminal or from a
scheduler task.

Usage:
    python -m warehouse.conformer.main [OPTIONS]

Options:
    --tables NAME ...   Only process these conformers (default: all)
    --config PATH       Path to silver.yml (default: config/silver.yml)
    --as-of DATE        Run date for date rules, YYYY-MM-DD (default: today)
    --dry-run           Conform and check without writing to the database
    --verbose           Enable debug logging
    --help              Show this message and exit

Examples:
    # Full reload of every silver table:
    python -m warehouse.conformer.main

    # Reload only the CRM sales lines with verbose logging:
    python -m warehouse.conformer.main --tables sales --verbose

    # Dry run to see quality issues without touching silver:
    python -m warehouse.conformer.main --dry-run

Exit Codes:
    0: Success
    1: One or more tables failed (the others were still loaded)
    2: Fatal error (configuration, database connection, etc.)
"""

import argparse
import logging
import os
import sys
from datetime import date, datetime, timezone
from typing import Any, Optional

from dotenv import load_dotenv

from .base import ConformanceError, Conformer, Row
from .config_loader import load_silver_config
from .db_operations import DatabaseError, SilverDB
from .quality import QualityIssue, check_references
from .registry import CONFORMER_NAMES, build_conformers

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='Conform bronze CRM/ERP tables into the silver schema',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--tables',
        nargs='+',
        choices=CONFORMER_NAMES,
        help='Conformers to run (default: all)',
        default=None
    )

    parser.add_argument(
        '--config',
        type=str,
        help='Path to silver.yml',
        default=None
    )

    parser.add_argument(
        '--as-of',
        type=date.fromisoformat,
        help='Run date used by date rules (YYYY-MM-DD, default: today)',
        default=None,
        dest='as_of'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Conform and check without writing to the database',
        dest='dry_run'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def _log_issues(issues: list[QualityIssue]) -> None:
    for issue in issues:
        logger.warning(
            f"Quality check failed: {issue}",
            extra={
                'table': issue.table,
                'check': issue.check,
                'count': issue.count,
            }
        )


def reference_checks(conformers: dict[str, Conformer], outputs: dict[str, list[Row]]) -> list[QualityIssue]:
    """
    Cross-table referential checks on conformed rows.

    Sales lines are checked against conformed products and customers, and
    ERP customer ids against the CRM alternate key. A check only runs when
    both sides were conformed in this run.

    Args:
        conformers: Conformers of this run, by name
        outputs: Conformed rows, by conformer name

    Returns:
        Issues found
    """
    issues: list[QualityIssue] = []

    if 'sales' in outputs and 'products' in outputs:
        issues += check_references(
            conformers['sales'].tables.target,
            outputs['sales'],
            'sls_prd_key',
            {row['prd_key'] for row in outputs['products']},
            f"{conformers['products'].tables.target}.prd_key",
        )

    if 'sales' in outputs and 'customers' in outputs:
        issues += check_references(
            conformers['sales'].tables.target,
            outputs['sales'],
            'sls_cust_id',
            {row['cst_id'] for row in outputs['customers']},
            f"{conformers['customers'].tables.target}.cst_id",
        )

    if 'erp_customers' in outputs and 'customers' in outputs:
        issues += check_references(
            conformers['erp_customers'].tables.target,
            outputs['erp_customers'],
            'cid',
            {row['cst_key'] for row in outputs['customers']},
            f"{conformers['customers'].tables.target}.cst_key",
        )

    return issues


def run_conformers(
    db: SilverDB,
    conformers: dict[str, Conformer],
    dry_run: bool = False
) -> dict[str, Any]:
    """
    Main silver load logic.

    Tables are independent: a failure while fetching, conforming or loading
    one table is logged and recorded, and the remaining tables still run.

    Args:
        db: Database interface
        conformers: Conformers to run, in load order
        dry_run: If True, don't write to database

    Returns:
        Dictionary with statistics:
        - tables: Number of conformers run
        - fetched: Bronze rows read
        - conformed: Silver rows produced
        - loaded: Silver rows written
        - quality_issues: Number of failed quality checks
        - failed_tables: Names of conformers that failed
    """
    stats: dict[str, Any] = {
        'tables': len(conformers),
        'fetched': 0,
        'conformed': 0,
        'loaded': 0,
        'quality_issues': 0,
        'failed_tables': [],
    }
    outputs: dict[str, list[Row]] = {}

    start_time = datetime.now(timezone.utc)

    logger.info(
        "Starting silver conformer",
        extra={
            'tables': list(conformers),
            'dry_run': dry_run,
        }
    )

    for name, conformer in conformers.items():
        table_start = datetime.now(timezone.utc)
        logger.info(f">> Working on {conformer.tables.target}")

        try:
            bronze_rows = db.fetch_bronze(conformer.tables.source)
            stats['fetched'] += len(bronze_rows)

            silver_rows = conformer.conform(bronze_rows)
            stats['conformed'] += len(silver_rows)

            issues = conformer.quality_checks(silver_rows)
            stats['quality_issues'] += len(issues)
            _log_issues(issues)

            if dry_run:
                logger.info(
                    f"DRY RUN: Would load {len(silver_rows)} rows into {conformer.tables.target}"
                )
            else:
                loaded = db.replace_table(conformer.tables.target, conformer.columns, silver_rows)
                stats['loaded'] += loaded

                count = db.count_rows(conformer.tables.target)
                if count != loaded:
                    logger.warning(
                        "Row count mismatch after load",
                        extra={'table': conformer.tables.target, 'inserted': loaded, 'counted': count}
                    )

            outputs[name] = silver_rows

        except (DatabaseError, ConformanceError) as e:
            stats['failed_tables'].append(name)
            logger.error(
                f"Failed to conform {conformer.tables.target}: {e}",
                extra={
                    'table': conformer.tables.target,
                    'error': str(e),
                    'error_type': type(e).__name__,
                }
            )
            continue

        logger.info(
            f"Finished {conformer.tables.target}",
            extra={
                'table': conformer.tables.target,
                'fetched': len(bronze_rows),
                'conformed': len(silver_rows),
                'duration_seconds': (datetime.now(timezone.utc) - table_start).total_seconds(),
            }
        )

    cross_issues = reference_checks(conformers, outputs)
    stats['quality_issues'] += len(cross_issues)
    _log_issues(cross_issues)

    duration = (datetime.now(timezone.utc) - start_time).total_seconds()

    logger.info(
        "Silver conformer completed",
        extra={
            'duration_seconds': duration,
            'fetched': stats['fetched'],
            'conformed': stats['conformed'],
            'loaded': stats['loaded'],
            'quality_issues': stats['quality_issues'],
            'failed_tables': stats['failed_tables'],
        }
    )

    return stats


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the silver conformer.

    Returns:
        Exit code (0 = success, 1 = some tables failed, 2 = fatal error)
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    database_url = os.getenv('DATABASE_URL')
    if not database_url:
        logger.error("DATABASE_URL environment variable must be set")
        return 2

    try:
        config = load_silver_config(args.config)
        conformers = build_conformers(config, as_of=args.as_of, names=args.tables)

        logger.info("Connecting to database")
        db = SilverDB(
            database_url,
            bronze_schema=config.bronze_schema,
            silver_schema=config.silver_schema,
        )

        stats = run_conformers(db=db, conformers=conformers, dry_run=args.dry_run)

        if stats['failed_tables']:
            logger.warning(
                f"Completed with errors: {len(stats['failed_tables'])} table(s) failed "
                f"({', '.join(stats['failed_tables'])})"
            )
            return 1

        logger.info("Silver conformer completed successfully")
        return 0

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 2

    except DatabaseError as e:
        logger.error(f"Database error: {e}")
        return 2

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130

    except Exception as e:
        logger.error(
            "Unexpected fatal error",
            extra={
                'error': str(e),
                'error_type': type(e).__name__,
            },
            exc_info=True
        )
        return 2


if __name__ == '__main__':
    sys.exit(main())
