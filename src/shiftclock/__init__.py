#!/usr/bin/env python3
"""
ShiftClock - An open-source attendance tracking engine

Shift-time and attendance status reasoning: action time rules, shift
window checks, work hours splitting, day status classification and
period summaries.

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

__version__ = "1.0.0"
