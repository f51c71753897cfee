#!/usr/bin/env python3
"""
TokenWeaver Test Runner

Runs the pytest suite, or one group of it, with coverage for the
tokenweaver package.
"""

import os
import sys
import subprocess
from pathlib import Path

TEST_GROUPS = {
    "all": ["tests/"],
    "core": ["tests/test_core_models.py", "tests/test_normalizer.py", "tests/test_values.py",
             "tests/test_size_budget.py"],
    "export": ["tests/test_stylesheets.py", "tests/test_data.py", "tests/test_package.py"],
    "ai": ["tests/test_ai_context.py", "tests/test_mcp_scaffold.py"],
    "store": ["tests/test_store.py", "tests/test_settings.py"],
    "cli": ["tests/test_cli.py"],
}


def check_requirements():
    """Check if test requirements are installed."""
    required_packages = ['pytest', 'pytest_cov', 'click', 'yaml', 'jinja2', 'chardet', 'dotenv']

    missing_packages = []
    for package in required_packages:
        try:
            __import__(package)
        except ImportError:
            missing_packages.append(package)

    if missing_packages:
        print(f"Missing required packages: {', '.join(missing_packages)}")
        print("\nInstall them with:")
        print("pip install -e .[dev]")
        return False

    print("All test requirements are installed")
    return True


def run_tests(test_type="all", verbose=False, coverage=True):
    """Run the test suite."""
    project_root = Path(__file__).parent
    os.chdir(project_root)

    cmd = [sys.executable, "-m", "pytest"] + TEST_GROUPS[test_type]

    if verbose:
        cmd.extend(["-v", "-s"])
    else:
        cmd.append("-q")

    if coverage:
        cmd.extend(["--cov=tokenweaver", "--cov-report=term-missing"])

    print(f"\nRunning tests: {' '.join(cmd)}")
    print("=" * 60)

    try:
        result = subprocess.run(cmd, check=False)
        return result.returncode == 0
    except KeyboardInterrupt:
        print("\nTests interrupted by user")
        return False


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Run TokenWeaver tests")
    parser.add_argument(
        "--type",
        choices=list(TEST_GROUPS),
        default="all",
        help="Group of tests to run"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--no-cov",
        action="store_true",
        help="Skip the coverage report"
    )
    parser.add_argument(
        "--check-only",
        action="store_true",
        help="Only check requirements, don't run tests"
    )

    args = parser.parse_args()

    print("TokenWeaver Test Suite")
    print("=" * 40)

    if not check_requirements():
        sys.exit(1)

    if args.check_only:
        return

    if not run_tests(test_type=args.type, verbose=args.verbose, coverage=not args.no_cov):
        print("\nSome tests failed. Check the output above for details.")
        sys.exit(1)
    print("\nAll tests passed!")


if __name__ == "__main__":
    main()
