"""Escolaris Backend.

Multi-tenant school management platform serving many independent
institutions from one deployment.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
