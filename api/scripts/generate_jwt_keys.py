#!/usr/bin/env python3
"""
Generate an RS256 key pair for signing development tokens.

Prints the pair as environment variable assignments for JWT_PRIVATE_KEY and
JWT_PUBLIC_KEY, plus a sample access token for each role.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.auth import AuthService, generate_key_pair


def to_env_value(pem: str) -> str:
    return pem.strip().replace("\n", "\\n")


if __name__ == "__main__":
    private_key, public_key = generate_key_pair()
    auth_service = AuthService(private_key, public_key)

    print("=== Environment Variables ===")
    print(f'JWT_PRIVATE_KEY="{to_env_value(private_key)}"')
    print(f'JWT_PUBLIC_KEY="{to_env_value(public_key)}"')

    print("\n=== Sample Tokens ===")
    print("citizen:", auth_service.issue_token("citizen-1", "citizen", name="Sample Citizen"))
    print("admin:", auth_service.issue_token("admin-1", "admin", name="Sample Admin"))
