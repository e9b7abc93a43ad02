import sys

from chunkdup.cli import main

sys.exit(main())
