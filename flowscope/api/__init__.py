# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
API Route Modules

FastAPI routers organized by domain:
- search: Variable/expression search
- schedules: Scheduled workflows and calendar events
- workflows: Workflow catalog, connection test, sub-workflow graph
"""
