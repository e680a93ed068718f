import sys

from glmbench.cli import main

sys.exit(main())
