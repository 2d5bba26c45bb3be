import sys

from cloudx_validator.cli import main

sys.exit(main())
