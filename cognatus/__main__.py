import sys

from cognatus.cli import main

sys.exit(main())
