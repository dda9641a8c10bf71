"""CLI entry point: `pmatch PATTERN` or `python -m pmatch PATTERN` prints the compiled plan."""

import sys


def main() -> int:
    import argparse
    from .compiler.driver import PatternCompiler
    from .plan.serialization import dump_plan
    from .shared.backend_kind import BackendKind
    from .shared.errors import PatternCompileError

    parser = argparse.ArgumentParser(prog="pmatch", description="Compile a pattern and print its binding plan.")
    parser.add_argument("pattern", help="Whitespace-separated node and edge tokens")
    parser.add_argument("--backend", default=BackendKind.GRAPH.value,
                        choices=[k.value for k in BackendKind], help="Target backend (default: graph)")
    parser.add_argument("--args", nargs="*", default=[], metavar="NAME", help="Argument names")
    parser.add_argument("--compact", action="store_true", help="Print the plan on one line")
    args = parser.parse_args()

    try:
        plan = PatternCompiler().compile(args.args, args.pattern, args.backend)
    except PatternCompileError as e:
        sys.stderr.write(e.format(color=sys.stderr.isatty()) + "\n")
        return 1

    print(dump_plan(plan, pretty=not args.compact))
    return 0


if __name__ == "__main__":
    sys.exit(main())
