# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for Escolaris.

This package contains domain services that encapsulate business logic.
Services receive an AsyncSession and own their transaction boundary.

Domains:
    enrollment: Level enrollment, withdrawal and promotion.
"""
