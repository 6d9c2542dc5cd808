# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Package for turning GitHub Actions job data into duration metrics."""
