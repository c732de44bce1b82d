import sys

from bloodpassport.cli import main

sys.exit(main())
