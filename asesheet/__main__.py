import sys

from asesheet.cli import main

sys.exit(main())
