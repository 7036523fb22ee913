"""
Management command to audit (and optionally repair) variants without option links.
"""

import json

from django.core.management.base import BaseCommand

from apps.reconciliation.services.orphan_audit import (
    ISSUE_EMPTY_OPTION_VALUE,
    ISSUE_MISSING_OPTION,
    ISSUE_NO_OPTIONS,
    OrphanAuditor,
)


class Command(BaseCommand):
    help = "Report orphaned variants and multi-variant products with missing option links"

    def add_arguments(self, parser):
        parser.add_argument('--repair', action='store_true', help="Link orphaned variants to their 'Title' option")
        parser.add_argument(
            '--fix-optionless',
            action='store_true',
            help="Create a 'Title' option for single-variant products without options",
        )
        parser.add_argument('--dry-run', action='store_true', help='Report repairs without writing them')
        parser.add_argument('--output', help='Write the detailed audit report to this JSON file')

    def handle(self, *args, **options):
        auditor = OrphanAuditor()
        dry_run = options['dry_run']

        orphaned = auditor.find_orphaned_products()
        optionless = auditor.find_optionless_single_variant_products()
        report = auditor.audit_multi_variant_products()
        summary = report.summary

        self.stdout.write('=' * 70)
        self.stdout.write('📊 AUDIT SUMMARY')
        self.stdout.write('=' * 70)
        self.stdout.write(f"Single-variant products with orphaned options: {len(orphaned)}")
        self.stdout.write(f"Single-variant products without options:      {len(optionless)}")
        for wc_type, count in sorted(auditor.breakdown_by_wc_type(optionless).items()):
            self.stdout.write(f"   {wc_type}: {count}")
        self.stdout.write(f"Multi-variant products audited: {report.total_products}")
        self.stdout.write(f"Variants audited:               {report.total_variants}")
        self.stdout.write(f"Products with issues:           {len(report.products_with_issues)}")
        self.stdout.write(f"  - Variants with NO options:          {summary['variants_with_no_options']}")
        self.stdout.write(f"  - Variants with MISSING options:     {summary['variants_with_missing_options']}")
        self.stdout.write(f"  - Variants with EMPTY option values: {summary['variants_with_empty_option_values']}")

        for issue in report.issues:
            line = f"   🚨 {issue.product_handle} variant {issue.variant_id} '{issue.variant_title}': "
            if issue.issue == ISSUE_NO_OPTIONS:
                line += 'no options linked'
            elif issue.issue == ISSUE_MISSING_OPTION:
                line += f"missing option '{issue.option_title}' (expected '{issue.expected_value}')"
            elif issue.issue == ISSUE_EMPTY_OPTION_VALUE:
                line += f"empty value for option '{issue.option_title}'"
            self.stdout.write(line)

        if options['output']:
            data = report.to_dict()
            data['orphaned_product_ids'] = [p.pk for p in orphaned]
            data['optionless_product_ids'] = [p.pk for p in optionless]
            with open(options['output'], 'w') as fh:
                json.dump(data, fh, indent=2)
            self.stdout.write(f"💾 Detailed report saved to: {options['output']}")

        if options['repair']:
            stats = auditor.repair_orphaned_products(dry_run=dry_run)
            self._write_stats('Orphan repair', stats)

        if options['fix_optionless']:
            stats = auditor.fix_optionless_single_variant_products(dry_run=dry_run)
            self._write_stats('Single-variant option fix', stats)

    def _write_stats(self, title, stats):
        mode = ' (dry run)' if stats.dry_run else ''
        self.stdout.write(f"\n{title}{mode}: processed={stats.processed} "
                          f"success={stats.success} skipped={stats.skipped} errors={len(stats.errors)}")
        for error in stats.errors:
            self.stdout.write(self.style.ERROR(f"  ❌ {error}"))
