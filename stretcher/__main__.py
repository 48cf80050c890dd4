import sys

from stretcher.main import main

sys.exit(main())
