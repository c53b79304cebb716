#!/usr/bin/env python3
"""
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""
