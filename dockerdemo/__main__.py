import sys

from dockerdemo.server import main

sys.exit(main())
