#!/usr/bin/env python3
"""
Route 53 Hosted Zone Comparison Tool

Verifies a DNS migration between two Route 53 hosted zones (possibly in
different AWS accounts). Every record set of the old zone is looked up in
the new zone; record sets that are absent are reported as missing and
record sets whose content differs are reported as mismatched.

The fetched record sets and the comparison results can be dumped as JSON
files for later inspection or for offline re-comparison.
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional

import dns.rdatatype
import yaml
from tabulate import tabulate

from compare_errors import ConfigurationError, PersistError, ZoneCompareError
from record_diff import RecordDiff, ResourceRecordSet, compare_records
from result_sink import ResultSink, artifact_label, load_records_json
from route53_fetcher import DEFAULT_MAX_PAGES, Route53ZoneReader, get_route53_client

DEFAULT_ZONE_NAME = 'mydomain.com.'

# Zone apex types Route 53 creates and manages per hosted zone
DEFAULT_EXCLUDED_TYPES = frozenset({'NS', 'SOA'})


def setup_logging(verbose: bool = False, log_file: str = None) -> logging.Logger:
    """Setup logging configuration"""
    logger = logging.getLogger('route53_zone_compare')
    logger.setLevel(logging.DEBUG)

    # Clear any existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console handler (stderr)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


class UserOutput:
    """Handle user-facing output separate from logging"""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def info(self, message: str):
        """Print informational message to user"""
        print(message)

    def error(self, message: str):
        """Print error message to user"""
        print(f"ERROR: {message}", file=sys.stderr)

    def verbose_info(self, message: str):
        """Print verbose information if verbose mode is enabled"""
        if self.verbose:
            print(f"[VERBOSE] {message}")


@dataclass(frozen=True)
class CompareConfig:
    """Settings for one comparison run, built once at startup"""
    old_profile: str = ''
    new_profile: str = ''
    old_zone_name: str = DEFAULT_ZONE_NAME
    new_zone_name: str = DEFAULT_ZONE_NAME
    skip_new: bool = False
    dump_json: bool = True
    excluded_types: FrozenSet[str] = DEFAULT_EXCLUDED_TYPES
    output_dir: str = '.'
    max_pages: int = DEFAULT_MAX_PAGES
    old_records_file: Optional[str] = None
    new_records_file: Optional[str] = None
    fail_on_diff: bool = False


CONFIG_KEYS = frozenset(f.name for f in fields(CompareConfig))


def load_config(config_file: str) -> Dict[str, Any]:
    """Load configuration from a YAML (or JSON) file"""
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config file {config_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_file} must contain a mapping")

    unknown = sorted(set(data) - CONFIG_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown settings in {config_file}: {', '.join(unknown)}")
    return data


def normalize_record_types(record_types: Iterable[str]) -> FrozenSet[str]:
    """Upper-case record type names and reject unknown ones"""
    if isinstance(record_types, str):
        record_types = record_types.split(',')

    normalized = set()
    for record_type in record_types:
        name = str(record_type).strip().upper()
        if not name:
            continue
        try:
            rdtype = dns.rdatatype.from_text(name)
        except (dns.rdatatype.UnknownRdatatype, ValueError) as e:
            raise ConfigurationError(f"Unknown record type '{record_type}'") from e
        normalized.add(dns.rdatatype.to_text(rdtype))
    return frozenset(normalized)


def build_config(args: argparse.Namespace, file_config: Dict[str, Any] = None) -> CompareConfig:
    """Merge defaults, config file values and command line values (highest priority)"""
    values: Dict[str, Any] = dict(file_config or {})

    overrides = {
        'old_profile': args.aws_profile_old,
        'new_profile': args.aws_profile_new,
        'old_zone_name': args.hosted_zone_name_old,
        'new_zone_name': args.hosted_zone_name_new,
        'skip_new': args.skip_new,
        'dump_json': args.dump_json,
        'output_dir': args.output_dir,
        'max_pages': args.max_pages,
        'old_records_file': args.old_records_file,
        'new_records_file': args.new_records_file,
        'fail_on_diff': args.fail_on_diff,
    }
    if args.no_exclude:
        overrides['excluded_types'] = []
    elif args.exclude_types:
        overrides['excluded_types'] = args.exclude_types

    for key, value in overrides.items():
        if value is not None:
            values[key] = value

    if 'excluded_types' in values:
        values['excluded_types'] = normalize_record_types(values['excluded_types'] or [])

    try:
        max_pages = int(values.get('max_pages', DEFAULT_MAX_PAGES))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"max_pages must be an integer: {e}") from e
    if max_pages < 1:
        raise ConfigurationError("max_pages must be at least 1")
    values['max_pages'] = max_pages

    return CompareConfig(**values)


@dataclass
class ComparisonOutcome:
    """Everything one run produced"""
    old_records: List[ResourceRecordSet]
    new_records: List[ResourceRecordSet]
    diff: RecordDiff
    artifacts: List[Path] = field(default_factory=list)


class ZoneComparator:
    """Runs the fetch, compare and persist pipeline for two hosted zones"""

    def __init__(self, config: CompareConfig, logger: logging.Logger = None,
                 client_factory: Callable = get_route53_client,
                 sink: ResultSink = None):
        self.config = config
        self.logger = logger or logging.getLogger('route53_zone_compare')
        self.client_factory = client_factory
        self.sink = sink or ResultSink(config.output_dir, self.logger)

    def run(self) -> ComparisonOutcome:
        config = self.config

        old_records = self._load_records(
            'Old', config.old_profile, config.old_zone_name, config.old_records_file)

        new_records: List[ResourceRecordSet] = []
        if config.skip_new:
            self.logger.info("Skipping new zone, every old record will be reported as missing")
        else:
            new_records = self._load_records(
                'New', config.new_profile, config.new_zone_name, config.new_records_file)

        diff = compare_records(old_records, new_records, config.excluded_types)
        self.logger.info(
            f"# Missing Records: {len(diff.missing)}\t# Mismatched Records: {len(diff.mismatched)}"
        )

        outcome = ComparisonOutcome(old_records=old_records, new_records=new_records, diff=diff)
        if config.dump_json:
            outcome.artifacts = self._persist(outcome)
        return outcome

    def _load_records(self, side: str, profile: str, zone_name: str,
                      records_file: Optional[str]) -> List[ResourceRecordSet]:
        if records_file:
            records = load_records_json(records_file)
            self.logger.info(f"{side} Records Count: {len(records)} (loaded from {records_file})")
            return records

        client = self.client_factory(profile, self.logger)
        reader = Route53ZoneReader(client, self.config.max_pages, self.logger)

        zone_id = reader.resolve_zone_id(zone_name)
        self.logger.info(f"{side} Hosted Zone ID: {zone_id}")

        records = reader.fetch_all_records(zone_id)
        self.logger.info(f"{side} Records Count: {len(records)}")
        return records

    def _persist(self, outcome: ComparisonOutcome) -> List[Path]:
        config = self.config
        artifacts = [
            self.sink.persist(artifact_label('old', config.old_zone_name),
                              [r.to_api() for r in outcome.old_records]),
        ]
        if not config.skip_new:
            artifacts.append(self.sink.persist(artifact_label('new', config.new_zone_name),
                                               [r.to_api() for r in outcome.new_records]))

        diff = outcome.diff.to_dict()
        artifacts.append(self.sink.persist(artifact_label('mismatched', config.old_zone_name),
                                           diff['Mismatched']))
        artifacts.append(self.sink.persist(artifact_label('missing', config.old_zone_name),
                                           diff['Missing']))
        return artifacts


class ReportGenerator:
    """Generate comparison reports"""

    def generate_text_report(self, outcome: ComparisonOutcome, config: CompareConfig) -> str:
        """Generate a text report"""
        diff = outcome.diff
        report_lines = []
        report_lines.append("Route 53 Zone Comparison Report")
        report_lines.append("=" * 50)
        report_lines.append("")

        report_lines.append("Zones:")
        report_lines.append(f"  Old: {config.old_zone_name} ({len(outcome.old_records)} record sets)")
        if config.skip_new:
            report_lines.append("  New: (skipped)")
        else:
            report_lines.append(f"  New: {config.new_zone_name} ({len(outcome.new_records)} record sets)")
        excluded = ', '.join(sorted(config.excluded_types)) or '(none)'
        report_lines.append(f"  Excluded Types: {excluded}")
        report_lines.append("")

        report_lines.append("Comparison Summary:")
        report_lines.append(f"  Missing Records: {len(diff.missing)}")
        report_lines.append(f"  Mismatched Records: {len(diff.mismatched)}")
        report_lines.append("")

        if diff.missing:
            rows = [[r.name, r.type, r.set_identifier or '', r.ttl if r.ttl is not None else '',
                     r.values_text()] for r in diff.missing]
            report_lines.append("MISSING RECORDS:")
            report_lines.append(tabulate(rows, headers=["Name", "Type", "Set ID", "TTL", "Values"],
                                         tablefmt="github"))
            report_lines.append("")

        if diff.mismatched:
            rows = []
            for pair in diff.mismatched:
                rows.append([
                    pair.old.name, pair.old.type, pair.old.set_identifier or '',
                    pair.old.ttl if pair.old.ttl is not None else '',
                    pair.new.ttl if pair.new.ttl is not None else '',
                    pair.old.values_text(), pair.new.values_text(),
                ])
            report_lines.append("MISMATCHED RECORDS:")
            report_lines.append(tabulate(
                rows,
                headers=["Name", "Type", "Set ID", "Old TTL", "New TTL", "Old Values", "New Values"],
                tablefmt="github"))
            report_lines.append("")

        if diff.has_differences:
            report_lines.append("COMPARISON RESULT: FAIL")
            report_lines.append("Some records did not survive the migration. Check the details above.")
        else:
            report_lines.append("COMPARISON RESULT: PASS")
            report_lines.append("All old records are present and identical in the new zone.")

        return "\n".join(report_lines)

    def generate_json_report(self, outcome: ComparisonOutcome, config: CompareConfig) -> str:
        """Generate a JSON report"""
        report_data = {
            "old_zone": config.old_zone_name,
            "new_zone": None if config.skip_new else config.new_zone_name,
            "excluded_types": sorted(config.excluded_types),
            "summary": {
                "old_record_count": len(outcome.old_records),
                "new_record_count": len(outcome.new_records),
                "missing_count": len(outcome.diff.missing),
                "mismatched_count": len(outcome.diff.mismatched),
            },
            "diff": outcome.diff.to_dict(),
            "artifacts": [str(path) for path in outcome.artifacts],
            "overall_status": "FAIL" if outcome.diff.has_differences else "PASS",
        }
        return json.dumps(report_data, indent=2, default=str)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Compare the record sets of two Route 53 hosted zones",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python route53_zone_compare.py --aws-profile-old legacy --aws-profile-new main \\
      --hosted-zone-name-old example.com. --hosted-zone-name-new example.com.
  python route53_zone_compare.py --aws-profile-old legacy --hosted-zone-name-old example.com. --skip-new
  python route53_zone_compare.py --old-records-file example.com-old.json \\
      --new-records-file example.com-new.json --no-dump-json
  python route53_zone_compare.py --config compare.yaml --format json --output report.json

Configuration file format (YAML or JSON):
  old_profile: legacy
  new_profile: main
  old_zone_name: example.com.
  new_zone_name: example.com.
  excluded_types: [NS, SOA]
  output_dir: results
        """
    )

    parser.add_argument("--aws-profile-old", help="AWS profile to use for old records")
    parser.add_argument("--aws-profile-new", help="AWS profile to use for new records")
    parser.add_argument("--hosted-zone-name-old",
                        help=f"Hosted zone name to use for old records (default: {DEFAULT_ZONE_NAME})")
    parser.add_argument("--hosted-zone-name-new",
                        help=f"Hosted zone name to use for new records (default: {DEFAULT_ZONE_NAME})")
    parser.add_argument("--skip-new", action="store_true", default=None,
                        help="Skip the new zone and only dump the old zone's records")
    parser.add_argument("--dump-json", action=argparse.BooleanOptionalAction, default=None,
                        help="Write record and diff JSON files (default: on)")
    parser.add_argument("--exclude-type", dest="exclude_types", action="append", metavar="TYPE",
                        help="Record type never reported as mismatched; repeatable "
                             "(default: NS and SOA)")
    parser.add_argument("--no-exclude", action="store_true",
                        help="Compare every record type, including NS and SOA")
    parser.add_argument("--output-dir", help="Directory for JSON files (default: current directory)")
    parser.add_argument("--max-pages", type=int,
                        help=f"Maximum record pages fetched per zone (default: {DEFAULT_MAX_PAGES})")
    parser.add_argument("--old-records-file", help="Load old records from a JSON dump instead of Route 53")
    parser.add_argument("--new-records-file", help="Load new records from a JSON dump instead of Route 53")
    parser.add_argument("-c", "--config", help="Configuration file (YAML or JSON)")
    parser.add_argument("-f", "--format", choices=["text", "json"],
                        default="text", help="Report format (default: text)")
    parser.add_argument("-o", "--output", help="Output file for the report")
    parser.add_argument("--fail-on-diff", action="store_true", default=None,
                        help="Exit with status 1 when missing or mismatched records are found")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose output")
    parser.add_argument("--log-file", help="Save detailed logs to file")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, client_factory: Callable = get_route53_client):
    """Main function"""
    args = parse_args(argv)

    logger = setup_logging(args.verbose, args.log_file)
    user_output = UserOutput(args.verbose)

    logger.info("Route 53 Zone Comparison started")
    logger.debug(f"Command line args: {' '.join(sys.argv[1:] if argv is None else argv)}")

    try:
        file_config = load_config(args.config) if args.config else {}
        config = build_config(args, file_config)
        logger.debug(f"Using configuration: {config}")

        comparator = ZoneComparator(config, logger, client_factory=client_factory)
        outcome = comparator.run()

        reporter = ReportGenerator()
        if args.format == "json":
            report = reporter.generate_json_report(outcome, config)
        else:
            report = reporter.generate_text_report(outcome, config)

        if args.output:
            try:
                with open(args.output, 'w', encoding='utf-8') as f:
                    f.write(report)
            except OSError as e:
                raise PersistError(f"Failed to write report {args.output}: {e}") from e
            user_output.info(f"Report saved to: {args.output}")
            logger.info(f"Report saved to: {args.output}")
        else:
            user_output.info(report)

        if args.format == "text":
            for path in outcome.artifacts:
                user_output.verbose_info(f"Wrote {path}")

        if outcome.diff.has_differences and config.fail_on_diff:
            logger.warning("Differences found between old and new zones")
            sys.exit(1)

        logger.info("Comparison completed")

    except KeyboardInterrupt:
        user_output.info("\nComparison cancelled by user")
        sys.exit(1)
    except ZoneCompareError as e:
        logger.error(str(e))
        user_output.error(str(e))
        sys.exit(1)
    except Exception as e:
        error_msg = f"Unexpected error: {e}"
        logger.error(error_msg, exc_info=True)
        user_output.error(error_msg)
        sys.exit(1)


if __name__ == "__main__":
    main()
