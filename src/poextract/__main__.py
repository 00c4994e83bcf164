import sys

from poextract.app import main

sys.exit(main())
