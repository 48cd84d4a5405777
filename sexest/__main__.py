import sys

from sexest.cli import main

sys.exit(main())
