# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Test Suite for flowscope

Structure:
- unit/: Unit tests for services and models
- test_api.py: Endpoint tests through FastAPI's TestClient
"""
