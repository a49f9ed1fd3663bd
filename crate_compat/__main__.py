import sys

from crate_compat.main import main

sys.exit(main())
