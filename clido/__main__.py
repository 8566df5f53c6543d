import sys

from clido.cli import main

sys.exit(main())
