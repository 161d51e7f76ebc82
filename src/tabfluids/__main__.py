import sys

from tabfluids.cli import main

sys.exit(main())
