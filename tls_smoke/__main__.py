import sys

from tls_smoke.runner import main

sys.exit(main())
