import sys

from .demanglec import main

sys.exit(main())
