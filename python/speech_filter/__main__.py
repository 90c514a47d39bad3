# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
import sys

from speech_filter.cli import main

sys.exit(main())
