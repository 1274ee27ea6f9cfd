# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

This package contains the authentication, validation, rate limiting and
error handling layers of the civic complaints API.
"""
