#!/usr/bin/env python3
"""
Generate a pytest module from the official WebAssembly spec test scripts.

Each .wast file becomes one test class: a factory per module, one method per
assertion, and a batched test per module that replays its assertions in
order against a single instance (memory, globals, etc. carry over as the
scripts expect). Traps get their own instance.

Usage:
    python3 generate_spectests.py [--out-dir DIR] [--jobs N] [--keep-going] [-v] [file.wast ...]
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from spectest_gen import SpecTestGenError, build

# Paths
SCRIPT_DIR = Path(__file__).parent
PROJECT_DIR = SCRIPT_DIR.parent
SPECTESTS_DIR = PROJECT_DIR / 'spectests'
DEFAULT_OUT_DIR = PROJECT_DIR / 'build'

TESTS = [
    'address.wast',
    'align.wast',
    'binary.wast',
    'block.wast',
    'br.wast',
    'br_if.wast',
    'br_table.wast',
    'break_drop.wast',
    'call.wast',
    'call_indirect.wast',
    'comments.wast',
    'const_.wast',
    'conversions.wast',
    'custom.wast',
    'data.wast',
    'elem.wast',
    'endianness.wast',
    'exports.wast',
    'f32_.wast',
    'f32_bitwise.wast',
    'f32_cmp.wast',
    'f64_.wast',
    'f64_bitwise.wast',
    'f64_cmp.wast',
    'fac.wast',
    'float_exprs.wast',
    'float_literals.wast',
    'float_memory.wast',
    'float_misc.wast',
    'forward.wast',
    'func.wast',
    'func_ptrs.wast',
    'get_local.wast',
    'globals.wast',
    'i32_.wast',
    'i64_.wast',
    'if_.wast',
    'int_exprs.wast',
    'int_literals.wast',
    'labels.wast',
    'left_to_right.wast',
    'loop_.wast',
    'memory.wast',
    'memory_grow.wast',
    'memory_redundancy.wast',
    'memory_trap.wast',
    'nop.wast',
    'return_.wast',
    'select.wast',
    'set_local.wast',
    'stack.wast',
    'start.wast',
    'store_retval.wast',
    'switch.wast',
    'tee_local.wast',
    'token.wast',
    'traps.wast',
    'typecheck.wast',
    'types.wast',
    'unwind.wast',
]


def main():
    parser = argparse.ArgumentParser(
        description='Generate pytest tests from WebAssembly spec scripts'
    )
    parser.add_argument(
        'wast_files',
        nargs='*',
        type=Path,
        help='Scripts to convert (default: the built-in list under --spec-dir)'
    )
    parser.add_argument(
        '--spec-dir',
        type=Path,
        default=SPECTESTS_DIR,
        help='Directory holding the built-in script list (default: %(default)s)'
    )
    parser.add_argument(
        '--out-dir',
        type=Path,
        default=Path(os.environ['OUT_DIR']) if 'OUT_DIR' in os.environ else DEFAULT_OUT_DIR,
        help='Where spectests.py is written (default: $OUT_DIR or %(default)s)'
    )
    parser.add_argument(
        '--jobs', '-j',
        type=int,
        default=1,
        help='Scripts generated in parallel (default: 1)'
    )
    parser.add_argument(
        '--keep-going',
        action='store_true',
        help='Leave out scripts that fail to generate instead of aborting'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s'
    )

    wast_files = args.wast_files or [args.spec_dir / name for name in TESTS]
    missing = [f for f in wast_files if not f.exists()]
    for f in missing:
        print(f"Warning: {f} not found")
    wast_files = [f for f in wast_files if f.exists()]
    if not wast_files:
        print("Error: no spec scripts to convert")
        return 1

    try:
        report = build(wast_files, args.out_dir, jobs=args.jobs, keep_going=args.keep_going)
    except SpecTestGenError as e:
        print(f"Error: {e}")
        return 1

    print()
    print("=" * 60)
    print(f"Output: {report.output}")
    print(f"Included: {len(report.included)}, Fat (skipped): {len(report.fat)}, "
          f"Failed: {len(report.failed)}")
    for name in report.fat:
        print(f"SKIP: {name} (fat test)")
    for name in report.failed:
        print(f"FAIL: {name}")
    print("=" * 60)

    return 0 if not report.failed else 1


if __name__ == '__main__':
    sys.exit(main())
