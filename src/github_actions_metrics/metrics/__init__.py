# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Package for the Prometheus metrics of the application."""
