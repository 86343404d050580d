import sys

from l4.cli import main

sys.exit(main())
