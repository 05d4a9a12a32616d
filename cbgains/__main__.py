import sys

from cbgains.cli import main

sys.exit(main())
