import sys

from imagesorter.cli import main

sys.exit(main())
