import sys

from hashfort.cli import main

sys.exit(main())
