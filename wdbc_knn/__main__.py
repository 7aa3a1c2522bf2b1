import sys

from wdbc_knn.cli import main

sys.exit(main())
