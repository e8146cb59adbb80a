import sys

from madpy.cli import main

sys.exit(main())
