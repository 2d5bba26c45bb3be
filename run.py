#!/usr/bin/env python3
"""
CloudX Deployment Validator

Run this script to validate a deployed CloudX image store: instance and
subnet placement, HTTP reachability, bucket compliance, and the
upload/download/list/delete path of the bucket.

Usage:
    python run.py                        # Use config.json
    python run.py -c custom.json         # Use custom config
    python run.py --checks bucket_tag    # Run selected compliance checks
    python run.py --skip-functional      # Compliance checks only
    python run.py -q                     # Quiet mode (summary only)
    python run.py -j results.json        # Output JSON results
    python run.py --describe             # Dump the bucket snapshot
"""

import sys
from cloudx_validator.cli import main

if __name__ == "__main__":
    sys.exit(main())
