import sys

from pr_reviewer.cli import main

sys.exit(main())
