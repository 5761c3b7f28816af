import sys

from docgrep_lib.cli import main

sys.exit(main())
