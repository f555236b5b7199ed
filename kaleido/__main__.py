"""
Command line entry point for the Kaleido front end.

Author: xwest
"""

import argparse
import sys

from . import __version__
from .driver import Driver, DriverOptions
from .parser.parser import DEFAULT_MAX_DEPTH


def main(argv=None) -> int:
    """Main entry point for the kaleido command"""

    parser = argparse.ArgumentParser(
        prog="kaleido",
        description="Kaleido language front end: parse, lower to LLVM IR, optionally JIT",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    kaleido                         # Read definitions from stdin
    kaleido prog.kal --jit          # Evaluate top-level expressions
    kaleido prog.kal --emit-llvm    # Print IR for each function
    echo 'def f(x) x*2' | kaleido --dump-module
        """
    )

    parser.add_argument('file', nargs='?', default='-',
                      help="Source file, '-' or omitted for stdin")

    # Output options
    parser.add_argument('--jit', action='store_true',
                      help='Evaluate top-level expressions with the LLVM JIT')
    parser.add_argument('--emit-llvm', action='store_true',
                      help='Print the IR of each function as it is generated')
    parser.add_argument('--dump-ast', action='store_true',
                      help='Print each parsed construct as an S-expression')
    parser.add_argument('--dump-module', action='store_true',
                      help='Print the linked module to stdout at end of input')
    parser.add_argument('--locations', action='store_true',
                      help='Show file:line:column on diagnostics')
    parser.add_argument('--max-depth', type=int, default=DEFAULT_MAX_DEPTH,
                      help='Maximum nesting of parentheses and calls (default: %(default)s)')
    parser.add_argument('--version', action='version',
                      version=f'%(prog)s {__version__}')

    args = parser.parse_args(argv)

    options = DriverOptions(
        evaluate=args.jit,
        emit_llvm=args.emit_llvm,
        dump_ast=args.dump_ast,
        show_locations=args.locations,
        keep_anonymous=args.dump_module,
        max_depth=args.max_depth,
    )

    try:
        if args.file == '-':
            driver = Driver(sys.stdin, options=options, filename="<stdin>")
            status = driver.run()
        else:
            try:
                source = open(args.file, encoding="utf-8")
            except OSError as e:
                print(f"Error: Could not open '{args.file}': {e.strerror}", file=sys.stderr)
                return 1
            with source:
                driver = Driver(source, options=options, filename=args.file)
                status = driver.run()
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except OSError as e:
        print(f"Error: Failed reading input: {e}", file=sys.stderr)
        return 1

    if args.dump_module:
        print(driver.backend.module_ir())
    return status


if __name__ == "__main__":
    sys.exit(main())
