import sys

from embedded_chromedriver.cli import main

sys.exit(main())
