import sys

from hanging_resources.main import main

sys.exit(main())
