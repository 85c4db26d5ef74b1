import sys

from nvcore.cli import main

sys.exit(main())
