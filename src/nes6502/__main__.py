import sys

from nes6502.cli import main

sys.exit(main())
