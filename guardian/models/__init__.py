# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


from .profile import Profile
from .checkin import CheckIn, Mood, SyncStatus
from .streak import StreakCounter
from .notification import NotificationLog
