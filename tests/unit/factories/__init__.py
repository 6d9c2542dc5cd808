# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Factories for test objects."""
