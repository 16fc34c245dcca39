#!/usr/bin/env python3
"""
synvm — Synacor Challenge Virtual Machine
=========================================

One CLI for running and inspecting program images:
    synvm run   — execute a program image
    synvm info  — summarize a program image

Usage:
    python synvm.py <command> [options]
    python synvm.py <command> --help

Examples:
    python synvm.py run challenge.bin
    python synvm.py run challenge.bin --status --port 8080
    python synvm.py run challenge.bin --input moves.txt -v
    python synvm.py run challenge.bin --trace --log-dir logs
    python synvm.py info challenge.bin

Exit codes (run):
    0    program halted
    1    fault, or image could not be loaded
    2    --max-steps reached
    130  interrupted (Ctrl-C)
"""

import argparse
import logging
import sys

from synacor_vm import __version__
from synacor_vm.config import RunConfig
from synacor_vm.emu import SynacorVM, StopReason
from synacor_vm.errors import ImageError
from synacor_vm.loader import image_info, load_image, read_image
from synacor_vm.log_setup import level_for, setup_logging
from synacor_vm.periph.console import Console

log = logging.getLogger("synacor_vm.cli")

EXIT_HALTED = 0
EXIT_FAILED = 1
EXIT_LIMIT = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="synvm",
        description="Synacor Challenge VM — run and inspect program images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""commands:
  run        Execute a program image
  info       Summarize a program image
""",
    )
    parser.add_argument("--version", action="version", version=f"synvm {__version__}")
    sub = parser.add_subparsers(dest="command", metavar="command")

    # ── run ──────────────────────────────────────────────────────────────
    p_run = sub.add_parser("run", help="Execute a program image")
    p_run.add_argument("image", help="Program image (little-endian 16-bit words)")
    p_run.add_argument("--max-steps", type=int, default=None,
                       help="Stop after N instructions (default: no limit)")
    p_run.add_argument("--input", default=None,
                       help="Read program input from FILE instead of stdin")
    p_run.add_argument("--status", action="store_true",
                       help="Serve the HTTP status page while running")
    p_run.add_argument("--host", default=None,
                       help="Status page host (default: $SYNVM_STATUS_HOST or 127.0.0.1)")
    p_run.add_argument("--port", type=int, default=None,
                       help="Status page port (default: $SYNVM_STATUS_PORT or 8080)")
    p_run.add_argument("--trace", action="store_true",
                       help="Log every instruction at DEBUG level")
    p_run.add_argument("--verbose", "-v", action="count", default=0,
                       help="Increase log verbosity (-v, -vv)")
    p_run.add_argument("--quiet", "-q", action="store_true",
                       help="Only log errors")
    p_run.add_argument("--log-dir", default=None,
                       help="Also write a DEBUG log file into DIR")

    # ── info ─────────────────────────────────────────────────────────────
    p_info = sub.add_parser("info", help="Summarize a program image")
    p_info.add_argument("image", help="Program image")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILED

    handler = COMMANDS[args.command]
    return handler(args)


# ═════════════════════════════════════════════════════════════════════════════
# COMMAND IMPLEMENTATIONS
# ═════════════════════════════════════════════════════════════════════════════

# ── run ──────────────────────────────────────────────────────────────────
def cmd_run(args):
    config = RunConfig.from_args(args)
    verbosity = config.verbosity
    if config.trace and config.log_dir is None:
        verbosity = max(verbosity, 2)
    setup_logging(console_level=level_for(verbosity), log_dir=config.log_dir)

    try:
        memory = load_image(args.image)
    except ImageError as e:
        log.error("%s", e)
        return EXIT_FAILED

    stdin = None
    if args.input:
        try:
            stdin = open(args.input, "r", encoding="utf-8")
        except OSError as e:
            log.error("Cannot open input %s: %s", args.input, e)
            return EXIT_FAILED

    try:
        vm = SynacorVM(memory, Console(stdin=stdin), trace=config.trace)

        if config.status:
            from synacor_vm.status import start_status_server
            start_status_server(vm, config.host, config.port)

        try:
            result = vm.run(max_steps=config.max_steps)
        except KeyboardInterrupt:
            vm.console.flush()
            log.warning("Interrupted at pc=%d after %d steps", vm.pc, vm.steps)
            return EXIT_INTERRUPTED
    finally:
        if stdin is not None:
            stdin.close()

    if result.failed:
        print(f"\nProgram failed: {result.fault}", file=sys.stderr)
        print(vm.describe(), file=sys.stderr)
        return EXIT_FAILED
    if result.reason is StopReason.LIMIT:
        print(f"\nStep limit reached at pc={result.pc} ({result.steps} steps)",
              file=sys.stderr)
        return EXIT_LIMIT
    return EXIT_HALTED


# ── info ─────────────────────────────────────────────────────────────────
def cmd_info(args):
    try:
        words = read_image(args.image)
    except ImageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    info = image_info(words)
    print(f"Image:     {args.image}")
    print(f"Words:     {info['words']} ({info['bytes']} bytes)")
    print(f"Padding:   {info['padding']} words")
    print(f"Non-zero:  {info['nonzero']} words")
    print(f"Max word:  {info['max_word']}")
    return EXIT_HALTED


# ═════════════════════════════════════════════════════════════════════════════
# COMMAND DISPATCH TABLE
# ═════════════════════════════════════════════════════════════════════════════

COMMANDS = {
    "run": cmd_run,
    "info": cmd_info,
}


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
