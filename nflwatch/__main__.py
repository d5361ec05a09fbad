import sys

from nflwatch.cli import main

sys.exit(main())
