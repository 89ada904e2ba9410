import sys

from stdiocapture.cli import main

sys.exit(main())
