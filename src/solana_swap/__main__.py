"""Entry point for python -m solana_swap."""

import sys

from solana_swap.cli import main

sys.exit(main())
