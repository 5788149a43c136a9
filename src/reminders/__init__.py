# halbot - Discord Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Reminders Package

Delayed/repeating task scheduling and reaction-triggered follow-ups.
"""

from .scheduler import (
    DONE,
    Done,
    RepeatAt,
    ScheduledAction,
    TaskResult,
    TaskScheduler,
)
from .triggers import (
    KEEP_LISTENING,
    STOP_LISTENING,
    ListenResult,
    ReactionEvent,
    ReactionTrigger,
    ReactionTriggerRegistry,
)
from .actions import ReminderAction, ThanksForReacting, THANKS_MESSAGE

__all__ = [
    "DONE",
    "Done",
    "RepeatAt",
    "ScheduledAction",
    "TaskResult",
    "TaskScheduler",
    "KEEP_LISTENING",
    "STOP_LISTENING",
    "ListenResult",
    "ReactionEvent",
    "ReactionTrigger",
    "ReactionTriggerRegistry",
    "ReminderAction",
    "ThanksForReacting",
    "THANKS_MESSAGE",
]
