import sys

from dbc2bsm.main import main

sys.exit(main())
