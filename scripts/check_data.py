#!/usr/bin/env python
"""
Data check pipeline - validates catalog.csv and sales.csv, then runs the tests.

Usage:
    python scripts/check_data.py
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from cart_pricing.data.catalog_loader import check_data_files


def main():
    print("=" * 60)
    print("CART PRICING DATA CHECK")
    print("=" * 60)
    print()

    print("[1/2] Validating data files...")
    report = check_data_files(verbose=True)

    if report["status"] != "success":
        print("\n❌ DATA CHECK FAILED")
        for error in report["errors"]:
            print(f"  ERROR: {error}")
        sys.exit(1)

    print()
    print("[2/2] Running tests...")

    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ DATA CHECK COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Items: {report['metrics']['item_count']}")
    print(f"  Items with bulk pricing: {report['metrics']['items_with_bulk_pricing']}")
    print(f"  Scheduled sales: {report['metrics']['sale_count']}")
    for kind, count in report['metrics']['sales_by_effect'].items():
        print(f"    {kind}: {count}")


if __name__ == "__main__":
    main()
