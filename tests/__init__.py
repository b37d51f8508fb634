# Underwrite Test Suite
# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Underwrite test suite.

Unit tests for the calculation core, debt schedules, projection builder,
valuation engine, analysis tools and valuation audits.
"""
