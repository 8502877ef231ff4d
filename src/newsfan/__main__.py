import sys

from .cli_router import main

sys.exit(main())
