# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Local shell only; generous but bounded
WRITE_RATE = os.getenv("GUARDIAN_WRITE_RATE", "30/minute")
