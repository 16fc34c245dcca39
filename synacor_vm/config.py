"""
Synacor VM — Machine Constants + Run Configuration

Architecture constants are fixed by the instruction set:
  - 15-bit address space: 32768 words, addresses 0..32767
  - 8 registers encoded as words 32768..32775
  - arithmetic wraps modulo 32768

Run configuration covers the parts the host chooses: step limit,
trace logging, the status page, and where log files go.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


# =============================================================================
#  ARCHITECTURE
# =============================================================================
MEMORY_SIZE = 32768          # words, addresses 0..32767
REGISTER_BASE = 32768        # word value of register 0
REGISTER_COUNT = 8           # registers 32768..32775
MAX_WORD = REGISTER_BASE + REGISTER_COUNT - 1   # 32775
MODULUS = 32768              # add/mult wrap
WORD_MASK = 0x7FFF           # 15-bit complement mask for `not`


# =============================================================================
#  STATUS PAGE
# =============================================================================
DEFAULT_STATUS_HOST = "127.0.0.1"
DEFAULT_STATUS_PORT = 8080
STATUS_MEMORY_WINDOW = 1024  # max words returned by /api/memory


@dataclass
class RunConfig:
    """Host-side settings for a single run."""
    max_steps: Optional[int] = None
    trace: bool = False
    status: bool = False
    host: str = DEFAULT_STATUS_HOST
    port: int = DEFAULT_STATUS_PORT
    log_dir: Optional[Path] = None
    verbosity: int = 0

    @classmethod
    def from_args(cls, args) -> "RunConfig":
        """Build from parsed `synvm run` arguments.

        Status host/port fall back to SYNVM_STATUS_HOST / SYNVM_STATUS_PORT
        when not given on the command line.
        """
        host = args.host or os.environ.get("SYNVM_STATUS_HOST", DEFAULT_STATUS_HOST)
        port = args.port
        if port is None:
            port = int(os.environ.get("SYNVM_STATUS_PORT", DEFAULT_STATUS_PORT))
        if args.quiet:
            verbosity = -1
        else:
            verbosity = args.verbose
        return cls(
            max_steps=args.max_steps,
            trace=args.trace,
            status=args.status,
            host=host,
            port=port,
            log_dir=Path(args.log_dir) if args.log_dir else None,
            verbosity=verbosity,
        )
