#  Copyright 2025 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Label names of the exported metrics."""

JOB_ID = "job_id"
WORKFLOW_NAME = "workflow_name"
JOB_NAME = "job_name"
CONCLUSION = "conclusion"
ENDPOINT = "endpoint"
STATUS_CODE = "status_code"
