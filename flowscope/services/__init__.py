# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Service layer for flowscope.

Services hold the business logic; routers in flowscope.api only validate
input, resolve the connection and delegate here.
"""
